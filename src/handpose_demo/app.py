"""
Hand Pose Demo - Main Application
==================================

Entry point for the webcam hand demos. Sets up the camera and the hand
landmark model, then runs the render loop until stopped.

Variants:
    gesture - landmark overlay + open hand / closed fist status text
    cube    - landmark overlay + a cube that follows the index fingertip
"""

import yaml
import logging
import argparse
import signal
from enum import Enum
from pathlib import Path
from typing import Callable, Optional
from dataclasses import dataclass, field

from .capture.camera import Camera, CameraConfig
from .detection.hand_detector import HandDetector, HandDetectorConfig, HandLandmarks
from .errors import SetupError
from .recognition.gesture_classifier import Gesture, GestureClassifier
from .scene.cube import CubeConfig, CubeScene, drive_object
from .scene.overlay import OverlayCanvas, OverlayConfig, draw_overlay
from .utils.logger import StatusLogger, setup_logging
from .utils.performance import PerformanceMonitor
from .utils.visualization import Visualizer, VisualizerConfig, make_notifier

logger = logging.getLogger(__name__)

VARIANTS = ("gesture", "cube")
KEY_ESC = 27


class LoopState(Enum):
    """Render loop lifecycle."""
    AWAITING_PERMISSIONS = "awaiting_permissions"
    AWAITING_MODEL = "awaiting_model"
    RUNNING = "running"
    STALLED = "stalled"    # Setup failed, or a tick raised; no further ticks
    STOPPED = "stopped"    # Stopped on request after running


@dataclass
class AppConfig:
    """Application configuration container."""
    variant: str = "gesture"
    camera: CameraConfig = field(default_factory=CameraConfig)
    mediapipe: HandDetectorConfig = field(default_factory=HandDetectorConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    cube: CubeConfig = field(default_factory=CubeConfig)
    visualization: VisualizerConfig = field(default_factory=VisualizerConfig)
    performance_target_fps: float = 25.0


def load_config(config_path) -> dict:
    """Load configuration from YAML file. A missing file yields defaults."""
    path = Path(config_path)
    if not path.exists():
        logger.warning(f"Config file not found: {path}, using defaults")
        return {}
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}")
    logger.info(f"Loaded configuration from {path}")
    return data


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary."""
    variant = config_dict.get("app", {}).get("variant", "gesture")
    if variant not in VARIANTS:
        raise ValueError(f"Unknown variant {variant!r}, expected one of {VARIANTS}")
    return AppConfig(
        variant=variant,
        camera=CameraConfig.from_dict(config_dict.get("camera", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        overlay=OverlayConfig.from_dict(config_dict.get("overlay", {})),
        cube=CubeConfig.from_dict(config_dict.get("cube", {})),
        visualization=VisualizerConfig.from_dict(config_dict.get("visualization", {})),
        performance_target_fps=config_dict.get("performance", {}).get("target_fps", 25.0),
    )


@dataclass
class RenderContext:
    """Everything the render loop owns: collaborators and scene state."""
    camera: Camera
    detector: HandDetector
    classifier: GestureClassifier
    overlay: OverlayCanvas
    visualizer: Visualizer
    notify: Callable[[str], None]
    cube: Optional[CubeScene] = None
    
    @classmethod
    def from_config(cls, config: AppConfig) -> "RenderContext":
        visualizer = Visualizer(config.visualization)
        return cls(
            camera=Camera(config.camera),
            detector=HandDetector(config.mediapipe),
            classifier=GestureClassifier(),
            overlay=OverlayCanvas(config.camera.width, config.camera.height),
            visualizer=visualizer,
            notify=make_notifier(visualizer),
            cube=CubeScene(config.cube) if config.variant == "cube" else None,
        )


class HandPoseApp:
    """
    Render loop for the hand demos.
    
    ``run()`` performs setup (camera, then model) and ticks until ``stop()``
    is called, a quit key is pressed, SIGINT/SIGTERM arrives or ``max_ticks``
    is reached. A setup failure leaves the loop STALLED: the user is told
    once and no tick is ever run.
    
    Each tick: read one frame -> detect -> classify and/or react -> present.
    Ticks never overlap; a slow detection delays the next tick.
    """
    
    def __init__(self, config: AppConfig, context: Optional[RenderContext] = None):
        self.config = config
        self.ctx = context or RenderContext.from_config(config)
        self.performance = PerformanceMonitor(target_fps=config.performance_target_fps)
        self.status_log = StatusLogger()
        
        self.state = LoopState.AWAITING_PERMISSIONS
        self.status_text = ""
        self.last_gesture: Optional[Gesture] = None
        self.last_cube_image = None
        self.ticks = 0
        self.failure: Optional[BaseException] = None
        self._running = False
    
    def setup(self) -> bool:
        """
        Acquire the camera, then load the model.
        
        Returns:
            True when the loop is RUNNING, False when it STALLED
        """
        self.state = LoopState.AWAITING_PERMISSIONS
        try:
            self.ctx.camera.start()
        except SetupError as e:
            return self._stall(e)
        
        self.state = LoopState.AWAITING_MODEL
        try:
            self.ctx.detector.start()
        except SetupError as e:
            self.ctx.camera.stop()
            return self._stall(e)
        
        self.state = LoopState.RUNNING
        logger.info(f"Running {self.config.variant} demo")
        return True
    
    def _stall(self, error: SetupError) -> bool:
        self.state = LoopState.STALLED
        logger.error(f"Setup failed ({type(error).__name__}): {error}")
        self.ctx.notify(error.user_message)
        return False
    
    def tick(self) -> Optional[Gesture]:
        """
        Run one tick.
        
        Returns:
            The status gesture for this tick, or None if no frame was available
            or the cube variant saw a hand (no classification there)
        """
        ctx = self.ctx
        self.performance.tick_start()
        
        with self.performance.measure("capture"):
            frame = ctx.camera.read()
        if frame is None:
            self.performance.tick_complete()
            return None
        
        with self.performance.measure("detection"):
            hands = ctx.detector.detect(frame.rgb)
        hand: Optional[HandLandmarks] = hands[0] if hands else None
        
        with self.performance.measure("react"):
            ctx.overlay.resize(frame.width, frame.height)
            gesture = self._react(hand)
        
        self._present(frame.image, gesture)
        self.performance.tick_complete()
        self.ticks += 1
        return gesture
    
    def _react(self, hand: Optional[HandLandmarks]) -> Optional[Gesture]:
        ctx = self.ctx
        gesture: Optional[Gesture] = None
        
        if hand is None:
            gesture = Gesture.NONE_DETECTED
        else:
            draw_overlay(ctx.overlay, hand, self.config.overlay)
            if self.config.variant == "gesture":
                gesture = ctx.classifier.classify(hand)
        
        # The cube spins even when no hand is in frame
        if ctx.cube is not None:
            self.last_cube_image = drive_object(
                ctx.cube, hand, ctx.overlay.width, ctx.overlay.height)
        
        self.last_gesture = gesture
        self.status_text = gesture.status_text if gesture else ""
        if gesture is not None:
            self.status_log.update(gesture.status_text)
        return gesture
    
    def _present(self, image, gesture: Optional[Gesture]) -> None:
        viz = self.ctx.visualizer
        display = self.ctx.overlay.composite(image.copy())
        if gesture is not None:
            viz.draw_status(display, gesture)
        viz.draw_performance(display, fps=self.performance.fps)
        viz.show(viz.config.camera_window, display)
        if self.last_cube_image is not None:
            viz.show(viz.config.cube_window, self.last_cube_image)
    
    def run(self, max_ticks: Optional[int] = None) -> bool:
        """
        Set up and run the loop.
        
        Returns:
            False if setup failed, True after a normal stop
        
        Raises:
            Whatever a tick raised; the loop is left STALLED with the error
            in ``failure``
        """
        if not self.setup():
            return False
        
        previous_handlers = {
            sig: signal.signal(sig, self._signal_handler)
            for sig in (signal.SIGINT, signal.SIGTERM)
        }
        
        self.performance.start()
        self._running = True
        try:
            while self._running:
                self.tick()
                self._handle_key(self.ctx.visualizer.poll_key())
                if max_ticks is not None and self.ticks >= max_ticks:
                    break
        except Exception as e:
            logger.exception(f"Render loop failed after {self.ticks} ticks")
            self.failure = e
            self.state = LoopState.STALLED
            raise
        finally:
            for sig, handler in previous_handlers.items():
                signal.signal(sig, handler)
            self.shutdown()
        return True
    
    def stop(self) -> None:
        """Request the loop to stop after the current tick."""
        self._running = False
    
    def shutdown(self) -> None:
        """Release camera, model and windows."""
        self._running = False
        self.ctx.camera.stop()
        self.ctx.detector.stop()
        self.ctx.visualizer.close()
        self.performance.stop()
        if self.state is LoopState.RUNNING:
            self.state = LoopState.STOPPED
    
    def _handle_key(self, key: int) -> None:
        if key in (ord('q'), KEY_ESC):
            self.stop()
        elif key == ord('f'):
            viz_config = self.ctx.visualizer.config
            viz_config.show_fps = not viz_config.show_fps
        elif key == ord('p'):
            print(self.performance.get_report())
    
    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop()


def main(argv=None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Webcam hand landmark demos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Variants:
  gesture   - Open hand / closed fist status (default)
  cube      - Cube follows the index fingertip

Keyboard Controls:
  q/ESC     - Quit
  f         - Toggle FPS counter
  p         - Print performance report
        """
    )
    parser.add_argument("--variant", "-v", choices=VARIANTS, default=None,
                        help="Demo variant (overrides config)")
    parser.add_argument("--config", "-c", default="config/config.yaml",
                        help="Path to configuration file")
    parser.add_argument("--max-ticks", type=int, default=None,
                        help="Stop after this many ticks")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)
    
    setup_logging("DEBUG" if args.debug else "INFO", log_file=args.log_file)
    
    config_dict = load_config(args.config)
    if args.variant:
        config_dict.setdefault("app", {})["variant"] = args.variant
    app_config = create_app_config(config_dict)
    
    app = HandPoseApp(app_config)
    return 0 if app.run(max_ticks=args.max_ticks) else 1


if __name__ == "__main__":
    raise SystemExit(main())
