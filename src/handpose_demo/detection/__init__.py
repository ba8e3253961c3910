"""Hand detection module using MediaPipe."""
from .hand_detector import (
    FINGERTIPS,
    HandDetector,
    HandDetectorConfig,
    HandLandmarks,
    Landmark,
    LandmarkIndex,
)

__all__ = [
    "FINGERTIPS",
    "HandDetector",
    "HandDetectorConfig",
    "HandLandmarks",
    "Landmark",
    "LandmarkIndex",
]
