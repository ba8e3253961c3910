"""
Hand Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe HandLandmarker. The model is loaded once during setup;
afterwards each frame yields zero or one hand's landmark set.
"""

import logging
import urllib.request
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import List, Optional, Tuple, NamedTuple

import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from ..errors import ModelLoadError

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path("models") / "hand_landmarker.task"  # Relative to the working directory


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


# Thumb, index, middle, ring, pinky
FINGERTIPS = (
    LandmarkIndex.THUMB_TIP,
    LandmarkIndex.INDEX_TIP,
    LandmarkIndex.MIDDLE_TIP,
    LandmarkIndex.RING_TIP,
    LandmarkIndex.PINKY_TIP,
)


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, normalized by image width
    y: float  # 0.0 to 1.0, normalized by image height
    z: float = 0.0  # Depth relative to wrist
    
    def to_pixel(self, width: int, height: int) -> Tuple[int, int]:
        """Convert normalized coordinates to integer pixel coordinates (for drawing)."""
        return (int(self.x * width), int(self.y * height))
    
    def scaled(self, width: int, height: int) -> Tuple[float, float]:
        """Convert normalized coordinates to pixel coordinates without rounding."""
        return (self.x * width, self.y * height)


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    model_url: str = HAND_LANDMARKER_MODEL_URL
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5
    running_mode: str = "VIDEO"  # IMAGE or VIDEO
    
    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            model_url=d.get("model_url", HAND_LANDMARKER_MODEL_URL),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
            running_mode=d.get("running_mode", "VIDEO"),
        )


@dataclass
class HandLandmarks:
    """One detected hand: 21 landmarks plus the size of the image they came from."""
    landmarks: List[Landmark]
    handedness: str  # "Left" or "Right"
    confidence: float
    image_width: int = 640
    image_height: int = 480
    
    def get(self, index: LandmarkIndex) -> Landmark:
        """Get landmark by index."""
        return self.landmarks[index]
    
    def get_pixel(self, index: LandmarkIndex) -> Tuple[int, int]:
        """Get landmark as pixel coordinates."""
        return self.get(index).to_pixel(self.image_width, self.image_height)
    
    def pixels(self) -> List[Tuple[int, int]]:
        """All landmarks as pixel coordinates, in index order."""
        return [lm.to_pixel(self.image_width, self.image_height) for lm in self.landmarks]
    
    def __len__(self) -> int:
        return len(self.landmarks)


def download_model(url: str, save_path: Path) -> None:
    """
    Download the hand landmarker model if not present.
    
    The file is fetched next to ``save_path`` with a ``.part`` suffix and
    moved into place only once complete; a failed download leaves no file at
    ``save_path``.
    
    Raises:
        ModelLoadError: the download failed
    """
    if save_path.exists():
        logger.info(f"Model already exists at {save_path}")
        return
    
    partial_path = save_path.with_suffix(save_path.suffix + ".part")
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {save_path}...")
        urllib.request.urlretrieve(url, partial_path)
        partial_path.replace(save_path)
    except OSError as e:
        partial_path.unlink(missing_ok=True)
        raise ModelLoadError(f"Failed to download model from {url}: {e}") from e
    logger.info("Model download complete!")


class HandDetector:
    """
    Hand detection wrapper using MediaPipe Tasks API (HandLandmarker).
    
    Tracks a single hand; ``detect`` returns a list of length 0 or 1.
    
    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.start()
        >>> hands = detector.detect(rgb_image)  # RGB format!
        >>> detector.stop()
    """
    
    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._frame_timestamp = 0
    
    def start(self) -> None:
        """
        Load the model and create the landmarker.
        
        Raises:
            ModelLoadError: the model could not be downloaded or loaded
        """
        model_path = Path(self.config.model_path or DEFAULT_MODEL_PATH)
        if not model_path.exists():
            download_model(self.config.model_url, model_path)
        
        if self.config.running_mode == "IMAGE":
            running_mode = vision.RunningMode.IMAGE
        else:
            running_mode = vision.RunningMode.VIDEO
        
        options = vision.HandLandmarkerOptions(
            base_options=python.BaseOptions(model_asset_path=str(model_path)),
            running_mode=running_mode,
            num_hands=1,
            min_hand_detection_confidence=self.config.min_detection_confidence,
            min_hand_presence_confidence=self.config.min_presence_confidence,
            min_tracking_confidence=self.config.min_tracking_confidence,
        )
        
        try:
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError, OSError) as e:
            raise ModelLoadError(f"Failed to initialize HandLandmarker: {e}") from e
        
        self._frame_timestamp = 0
        logger.info("Handpose model loaded successfully.")
        logger.debug(f"Model: {model_path}, running mode: {self.config.running_mode}")
    
    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
        logger.info("HandLandmarker stopped")
    
    @property
    def is_loaded(self) -> bool:
        return self._landmarker is not None
    
    def detect(self, image: np.ndarray, timestamp_ms: Optional[int] = None) -> List[HandLandmarks]:
        """
        Detect a hand in the given image.
        
        Args:
            image: RGB image as numpy array (H, W, 3)
            timestamp_ms: Timestamp in milliseconds (VIDEO mode); a ~30 FPS
                counter is used when omitted
            
        Returns:
            Empty list, or a list with the single detected hand
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return []
        
        height, width = image.shape[:2]
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)
        
        if self.config.running_mode == "IMAGE":
            result = self._landmarker.detect(mp_image)
        else:
            if timestamp_ms is None:
                self._frame_timestamp += 33
                timestamp_ms = self._frame_timestamp
            result = self._landmarker.detect_for_video(mp_image, timestamp_ms)
        
        if not result.hand_landmarks:
            return []
        
        handedness, confidence = "Right", 0.0
        if result.handedness:
            handedness = result.handedness[0][0].category_name
            confidence = result.handedness[0][0].score
        
        return [HandLandmarks(
            landmarks=[Landmark(x=lm.x, y=lm.y, z=lm.z) for lm in result.hand_landmarks[0]],
            handedness=handedness,
            confidence=confidence,
            image_width=width,
            image_height=height,
        )]
    
    def __enter__(self):
        self.start()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
