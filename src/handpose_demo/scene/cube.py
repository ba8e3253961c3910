"""
Hand-Driven Cube
=================

3D scene reactor. The index fingertip positions a cube inside a fixed
[-extent, extent] object-space square while the cube spins at a constant
rate whether or not a hand is visible.

Rendering is a small software pipeline: rotate and translate the cube's
vertices with numpy, project them through a perspective camera looking down
-Z, and fill the faces back to front with OpenCV.
"""

import math
import cv2
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from ..detection.hand_detector import HandLandmarks, LandmarkIndex

# Unit cube corners and the four corners of each face (counter-clockwise
# seen from outside)
_CUBE_VERTICES = np.array([
    [-1, -1, -1], [1, -1, -1], [1, 1, -1], [-1, 1, -1],
    [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1],
], dtype=np.float64) * 0.5

_CUBE_FACES = (
    (4, 5, 6, 7),  # front (+Z)
    (1, 0, 3, 2),  # back (-Z)
    (0, 4, 7, 3),  # left (-X)
    (5, 1, 2, 6),  # right (+X)
    (7, 6, 2, 3),  # top (+Y)
    (0, 1, 5, 4),  # bottom (-Y)
)


@dataclass
class CubeConfig:
    """Cube scene settings."""
    rotation_step: float = 0.01     # Radians added to each axis per tick
    object_extent: float = 2.0      # Fingertip maps into [-extent, extent]
    size: float = 1.0               # Edge length in object units
    fov_degrees: float = 75.0       # Vertical field of view
    camera_distance: float = 5.0    # Camera sits at (0, 0, distance)
    view_width: int = 640
    view_height: int = 480
    
    # Colors (BGR)
    face_color: Tuple[int, int, int] = (0, 255, 0)
    edge_color: Tuple[int, int, int] = (0, 96, 0)
    background_color: Tuple[int, int, int] = (0, 0, 0)
    
    @classmethod
    def from_dict(cls, config: dict) -> "CubeConfig":
        colors = config.get("colors", {})
        return cls(
            rotation_step=config.get("rotation_step", 0.01),
            object_extent=config.get("object_extent", 2.0),
            size=config.get("size", 1.0),
            fov_degrees=config.get("fov_degrees", 75.0),
            camera_distance=config.get("camera_distance", 5.0),
            view_width=config.get("view_width", 640),
            view_height=config.get("view_height", 480),
            face_color=tuple(colors.get("face", [0, 255, 0])),
            edge_color=tuple(colors.get("edge", [0, 96, 0])),
            background_color=tuple(colors.get("background", [0, 0, 0])),
        )


@dataclass
class CubeState:
    """Cube transform, accumulated across ticks."""
    x: float = 0.0
    y: float = 0.0
    rx: float = 0.0
    ry: float = 0.0


def rotation_matrix(rx: float, ry: float, rz: float = 0.0) -> np.ndarray:
    """Euler XYZ rotation (X applied last), the usual scene-graph order."""
    cx, sx = math.cos(rx), math.sin(rx)
    cy, sy = math.cos(ry), math.sin(ry)
    cz, sz = math.cos(rz), math.sin(rz)
    rot_x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]])
    rot_y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]])
    rot_z = np.array([[cz, -sz, 0], [sz, cz, 0], [0, 0, 1]])
    return rot_x @ rot_y @ rot_z


class CubeScene:
    """
    A single cube seen by a fixed perspective camera.
    
    Example:
        >>> scene = CubeScene(CubeConfig())
        >>> image = drive_object(scene, hand, 640, 480)
        >>> cv2.imshow("Cube", image)
    """
    
    def __init__(self, config: Optional[CubeConfig] = None):
        self.config = config or CubeConfig()
        self.state = CubeState()
        self.render_count = 0
    
    def world_vertices(self) -> np.ndarray:
        """Cube corners after rotation and translation, shape (8, 3)."""
        rot = rotation_matrix(self.state.rx, self.state.ry)
        verts = (_CUBE_VERTICES * self.config.size) @ rot.T
        return verts + np.array([self.state.x, self.state.y, 0.0])
    
    def project(self, points: np.ndarray) -> np.ndarray:
        """Project world points to view pixel coordinates, shape (N, 2)."""
        width, height = self.config.view_width, self.config.view_height
        focal = (height / 2) / math.tan(math.radians(self.config.fov_degrees) / 2)
        depth = self.config.camera_distance - points[:, 2]
        screen_x = width / 2 + focal * points[:, 0] / depth
        screen_y = height / 2 - focal * points[:, 1] / depth
        return np.stack([screen_x, screen_y], axis=1)
    
    def render(self) -> np.ndarray:
        """Draw the scene into a new BGR image."""
        cfg = self.config
        image = np.empty((cfg.view_height, cfg.view_width, 3), dtype=np.uint8)
        image[:] = cfg.background_color
        
        world = self.world_vertices()
        screen = np.round(self.project(world)).astype(np.int32)
        eye = np.array([0.0, 0.0, cfg.camera_distance])
        
        # Painter's algorithm: farthest face first
        faces = sorted(
            _CUBE_FACES,
            key=lambda face: -np.linalg.norm(world[list(face)].mean(axis=0) - eye),
        )
        for face in faces:
            corners = world[list(face)]
            normal = np.cross(corners[1] - corners[0], corners[2] - corners[0])
            to_eye = eye - corners.mean(axis=0)
            facing = float(np.dot(normal, to_eye))
            if facing <= 0:
                continue
            
            # Flat shading by the angle to the viewer
            shade = 0.35 + 0.65 * facing / (np.linalg.norm(normal) * np.linalg.norm(to_eye))
            color = tuple(int(c * shade) for c in cfg.face_color)
            polygon = screen[list(face)]
            cv2.fillConvexPoly(image, polygon, color)
            cv2.polylines(image, [polygon], True, cfg.edge_color, 1)
        
        self.render_count += 1
        return image


def fingertip_to_object(
    pixel_x: float,
    pixel_y: float,
    canvas_width: int,
    canvas_height: int,
    extent: float = 2.0
) -> Tuple[float, float]:
    """
    Map a canvas pixel into the object-space square.
    
    (0, 0) maps to (-extent, extent) and (width, height) to (extent, -extent).
    Y is inverted: pixel rows grow downwards, object Y grows upwards.
    """
    span = 2 * extent
    obj_x = (pixel_x / canvas_width) * span - extent
    obj_y = -(pixel_y / canvas_height) * span + extent
    return obj_x, obj_y


def drive_object(
    scene: CubeScene,
    hand: Optional[HandLandmarks],
    canvas_width: int,
    canvas_height: int
) -> np.ndarray:
    """
    Advance the cube by one tick and render it.
    
    The index fingertip sets the cube position (absolute, not accumulated).
    Without a hand the position holds its last value. Rotation always
    advances by ``rotation_step`` on both axes.
    
    Returns:
        The rendered scene image
    """
    cfg = scene.config
    state = scene.state
    
    if hand is not None:
        pixel_x, pixel_y = hand.get(LandmarkIndex.INDEX_TIP).scaled(
            hand.image_width, hand.image_height)
        state.x, state.y = fingertip_to_object(
            pixel_x, pixel_y, canvas_width, canvas_height, cfg.object_extent)
    
    state.rx += cfg.rotation_step
    state.ry += cfg.rotation_step
    
    return scene.render()
