"""
Landmark Overlay
=================

2D scene reactor: a transparent drawing layer over the camera image with one
filled circle per landmark.
"""

import cv2
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from ..detection.hand_detector import HandLandmarks


@dataclass
class OverlayConfig:
    """Landmark marker style (BGR)."""
    radius: int = 5
    color: Tuple[int, int, int] = (0, 0, 255)  # Red
    
    @classmethod
    def from_dict(cls, config: dict) -> "OverlayConfig":
        return cls(
            radius=config.get("radius", 5),
            color=tuple(config.get("color", [0, 0, 255])),
        )


class OverlayCanvas:
    """
    Drawing layer the size of the camera frame.
    
    Black pixels are transparent when the layer is composited onto a frame.
    """
    
    def __init__(self, width: int, height: int):
        self.buffer = np.zeros((height, width, 3), dtype=np.uint8)
    
    @property
    def width(self) -> int:
        return self.buffer.shape[1]
    
    @property
    def height(self) -> int:
        return self.buffer.shape[0]
    
    def resize(self, width: int, height: int) -> None:
        """Match a new frame size. The layer is cleared."""
        if (width, height) != (self.width, self.height):
            self.buffer = np.zeros((height, width, 3), dtype=np.uint8)
        else:
            self.clear()
    
    def clear(self) -> None:
        self.buffer[:] = 0
    
    @property
    def is_blank(self) -> bool:
        return not self.buffer.any()
    
    def composite(self, image: np.ndarray) -> np.ndarray:
        """Copy the drawn (non-black) pixels onto ``image`` in place."""
        mask = self.buffer.any(axis=2)
        image[mask] = self.buffer[mask]
        return image


def draw_overlay(
    canvas: OverlayCanvas,
    hand: HandLandmarks,
    config: Optional[OverlayConfig] = None
) -> None:
    """
    Replace the overlay with the landmarks of ``hand``.
    
    The previous overlay is cleared first; circles are drawn in landmark
    index order at the landmark's pixel position on the canvas.
    """
    config = config or OverlayConfig()
    canvas.clear()
    for lm in hand.landmarks:
        center = lm.to_pixel(hand.image_width, hand.image_height)
        cv2.circle(canvas.buffer, center, config.radius, config.color, -1)
