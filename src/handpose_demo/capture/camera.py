"""
Camera Capture Module
======================

Frame source for the demos. Opens the webcam once with the configured
constraints and hands out the current frame on demand.

Reads are synchronous: the render loop asks for exactly one frame per tick,
so a slow tick delays the next read instead of queueing frames.
"""

import cv2
import os
import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
import numpy as np

from ..errors import DeviceUnavailableError, PermissionDeniedError

logger = logging.getLogger(__name__)


@dataclass
class CameraConfig:
    """Camera constraints and capture settings."""
    device_id: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30
    buffer_size: int = 1
    flip_horizontal: bool = False
    require_resolution: bool = False  # Fail instead of accepting a different size
    warmup_frames: int = 5
    
    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 640),
            height=config.get("height", 480),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            flip_horizontal=config.get("flip_horizontal", False),
            require_resolution=config.get("require_resolution", False),
            warmup_frames=config.get("warmup_frames", 5),
        )


@dataclass
class Frame:
    """Container for captured frame with metadata."""
    image: np.ndarray
    timestamp: float
    frame_number: int
    
    @property
    def rgb(self) -> np.ndarray:
        """Convert BGR to RGB."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)
    
    @property
    def width(self) -> int:
        return self.image.shape[1]
    
    @property
    def height(self) -> int:
        return self.image.shape[0]


class Camera:
    """
    Webcam frame source.
    
    ``start()`` acquires the device and raises a ``SetupError`` subclass if
    it cannot:
    
    - ``PermissionDeniedError``: the device node exists but is not
      accessible, or the device opens but refuses to deliver frames
    - ``DeviceUnavailableError``: no device could be opened, or
      ``require_resolution`` is set and the device cannot satisfy it
    
    Example:
        >>> camera = Camera(CameraConfig())
        >>> camera.start()
        >>> frame = camera.read()
        >>> if frame:
        ...     process(frame.image)
        >>> camera.stop()
    """
    
    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_number = 0
        self._running = False
        self._actual_size: Tuple[int, int] = (self.config.width, self.config.height)
    
    def start(self) -> None:
        """
        Open the camera.
        
        Raises:
            PermissionDeniedError: access to the camera was refused
            DeviceUnavailableError: the camera cannot be opened with the constraints
        """
        logger.info("Starting camera (device={}, {}x{}@{}fps)".format(
            self.config.device_id, self.config.width, self.config.height, self.config.fps))
        
        if self._device_node_denied():
            raise PermissionDeniedError(
                f"No permission to open camera device {self.config.device_id}")
        
        opened_but_silent = False
        
        # V4L2 first (Linux USB cameras), then whatever OpenCV picks
        for backend in [cv2.CAP_V4L2, cv2.CAP_ANY]:
            if backend == cv2.CAP_V4L2:
                logger.debug("Trying V4L2 backend...")
                self._cap = cv2.VideoCapture(self.config.device_id, backend)
            else:
                logger.debug("Trying default backend...")
                self._cap = cv2.VideoCapture(self.config.device_id)
            
            if not self._cap.isOpened():
                logger.warning("Backend failed, trying next...")
                self._cap = None
                continue
            
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
            self._cap.set(cv2.CAP_PROP_FPS, self.config.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)
            
            ret, image = self._cap.read()
            if ret and image is not None:
                break
            
            logger.warning("Can't read frames, trying next backend...")
            opened_but_silent = True
            self._cap.release()
            self._cap = None
        
        if self._cap is None:
            if opened_but_silent:
                raise PermissionDeniedError(
                    f"Camera device {self.config.device_id} opened but delivered no frames")
            raise DeviceUnavailableError(
                f"Failed to open camera device {self.config.device_id}")
        
        actual_width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        actual_fps = self._cap.get(cv2.CAP_PROP_FPS)
        logger.info("Camera initialized: {}x{}@{}fps".format(actual_width, actual_height, actual_fps))
        
        if self.config.require_resolution and (
                (actual_width, actual_height) != (self.config.width, self.config.height)):
            self._cap.release()
            self._cap = None
            raise DeviceUnavailableError(
                "Camera cannot provide {}x{} (got {}x{})".format(
                    self.config.width, self.config.height, actual_width, actual_height))
        
        if actual_width > 0 and actual_height > 0:
            self._actual_size = (actual_width, actual_height)
        
        if self.config.warmup_frames > 0:
            logger.debug("Warming up camera ({} frames)...".format(self.config.warmup_frames))
            for _ in range(self.config.warmup_frames):
                self._cap.read()
        
        self._running = True
        self._frame_number = 0
    
    def stop(self) -> None:
        """Release the camera."""
        self._running = False
        if self._cap:
            self._cap.release()
            self._cap = None
        logger.info("Camera stopped")
    
    def read(self) -> Optional[Frame]:
        """
        Capture the current frame.
        
        Returns:
            Frame or None if the camera is not running or the read failed
        """
        if not self._running or not self._cap:
            return None
        
        ret, image = self._cap.read()
        if not ret or image is None:
            logger.warning("Failed to capture frame")
            return None
        
        # Mirror so the overlay moves the same way as the user's hand
        if self.config.flip_horizontal:
            image = cv2.flip(image, 1)
        
        self._frame_number += 1
        return Frame(image=image, timestamp=time.time(), frame_number=self._frame_number)
    
    def _device_node_denied(self) -> bool:
        """True when the V4L device node exists but this process cannot open it."""
        node = Path(f"/dev/video{self.config.device_id}")
        return node.exists() and not os.access(node, os.R_OK)
    
    @property
    def is_running(self) -> bool:
        return self._running
    
    @property
    def resolution(self) -> Tuple[int, int]:
        """Resolution reported by the device (requested size before start)."""
        return self._actual_size
    
    def __enter__(self):
        self.start()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
