"""
Visualization Module
=====================

OpenCV windows for the demos: the camera view with landmark overlay and
status text, the cube view, and blocking alerts for setup failures.
"""

import cv2
import logging
import numpy as np
from typing import Callable, Optional, Tuple
from dataclasses import dataclass

from ..recognition.gesture_classifier import Gesture

logger = logging.getLogger(__name__)


@dataclass
class VisualizerConfig:
    """Visualization settings."""
    camera_window: str = "Hand Pose Demo"
    cube_window: str = "Hand Pose Demo - Cube"
    show_fps: bool = True
    show_status: bool = True
    notify: str = "window"  # "window" (blocking alert) or "log"
    
    # Colors (BGR format)
    text_color: Tuple[int, int, int] = (0, 255, 255)        # Yellow
    gesture_color: Tuple[int, int, int] = (0, 255, 0)       # Green
    warning_color: Tuple[int, int, int] = (0, 0, 255)       # Red
    
    font_scale: float = 0.7
    font_thickness: int = 2
    
    @classmethod
    def from_dict(cls, config: dict) -> "VisualizerConfig":
        """Create config from dictionary."""
        colors = config.get("colors", {})
        return cls(
            camera_window=config.get("camera_window", "Hand Pose Demo"),
            cube_window=config.get("cube_window", "Hand Pose Demo - Cube"),
            show_fps=config.get("show_fps", True),
            show_status=config.get("show_status", True),
            notify=config.get("notify", "window"),
            text_color=tuple(colors.get("text", [0, 255, 255])),
            gesture_color=tuple(colors.get("gesture", [0, 255, 0])),
            warning_color=tuple(colors.get("warning", [0, 0, 255])),
            font_scale=config.get("font_scale", 0.7),
            font_thickness=config.get("font_thickness", 2),
        )


class Visualizer:
    """
    Draws text overlays and owns the OpenCV windows.
    
    Example:
        >>> viz = Visualizer(VisualizerConfig())
        >>> viz.draw_status(frame.image, Gesture.OPEN_HAND)
        >>> viz.show(viz.config.camera_window, frame.image)
        >>> key = viz.poll_key()
    """
    
    def __init__(self, config: Optional[VisualizerConfig] = None):
        self.config = config or VisualizerConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX
    
    def draw_status(self, image: np.ndarray, gesture: Gesture) -> np.ndarray:
        """Draw the status region (bottom-left) with the gesture text."""
        if not self.config.show_status:
            return image
        
        height = image.shape[0]
        if gesture in (Gesture.OPEN_HAND, Gesture.CLOSED_FIST):
            color = self.config.gesture_color
        elif gesture is Gesture.NONE_DETECTED:
            color = self.config.warning_color
        else:
            color = self.config.text_color
        
        cv2.putText(image, gesture.status_text, (20, height - 30),
                    self._font, self.config.font_scale,
                    color, self.config.font_thickness)
        return image
    
    def draw_performance(self, image: np.ndarray, fps: float = 0.0) -> np.ndarray:
        """Draw the FPS counter (top-left)."""
        if not self.config.show_fps:
            return image
        cv2.putText(image, f"FPS: {fps:.1f}", (20, 30),
                    self._font, self.config.font_scale,
                    self.config.text_color, self.config.font_thickness)
        return image
    
    def show(self, window: str, image: np.ndarray) -> None:
        cv2.imshow(window, image)
    
    def poll_key(self, delay_ms: int = 1) -> int:
        """Pump the window event loop once; returns the pressed key or -1."""
        key = cv2.waitKey(delay_ms)
        return key & 0xFF if key >= 0 else -1
    
    def show_alert(self, title: str, message: str) -> None:
        """Show ``message`` in its own window and block until a key is pressed."""
        width, height = 640, 160
        image = np.zeros((height, width, 3), dtype=np.uint8)
        
        # Wrap to fit the window
        lines, line = [], ""
        for word in message.split():
            candidate = f"{line} {word}".strip()
            if cv2.getTextSize(candidate, self._font, 0.6, 1)[0][0] > width - 40:
                lines.append(line)
                line = word
            else:
                line = candidate
        lines.append(line)
        lines.append("Press any key to close.")
        
        for i, text in enumerate(lines):
            color = self.config.text_color if i == len(lines) - 1 else self.config.warning_color
            cv2.putText(image, text, (20, 40 + i * 30), self._font, 0.6, color, 1)
        
        cv2.imshow(title, image)
        cv2.waitKey(0)
        cv2.destroyWindow(title)
    
    def close(self) -> None:
        cv2.destroyAllWindows()


def make_notifier(visualizer: Visualizer) -> Callable[[str], None]:
    """
    Build the user notification callback for setup failures.
    
    ``window`` mode shows a blocking alert; ``log`` mode (headless runs)
    only writes the message to the log.
    """
    if visualizer.config.notify == "log":
        def notify(message: str) -> None:
            logger.critical(message)
        return notify
    
    def notify(message: str) -> None:
        visualizer.show_alert(visualizer.config.camera_window, message)
    return notify
