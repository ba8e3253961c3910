"""Scene reactors: 2D landmark overlay and the hand-driven 3D cube."""
from .overlay import OverlayCanvas, OverlayConfig, draw_overlay
from .cube import CubeConfig, CubeScene, CubeState, drive_object, fingertip_to_object

__all__ = [
    "OverlayCanvas",
    "OverlayConfig",
    "draw_overlay",
    "CubeConfig",
    "CubeScene",
    "CubeState",
    "drive_object",
    "fingertip_to_object",
]
