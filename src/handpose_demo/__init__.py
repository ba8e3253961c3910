"""
Hand Pose Demo
===============

Webcam demos driven by MediaPipe hand landmarks.

Modules:
    - capture: Camera frame acquisition
    - detection: MediaPipe hand landmark detection
    - recognition: Open hand / closed fist classification
    - scene: Landmark overlay and hand-driven cube
    - utils: Logging, performance monitoring, visualization
"""

__version__ = "1.0.0"
