"""Logging, performance and visualization helpers."""
from .logger import StatusLogger, setup_logging
from .performance import PerformanceMonitor
from .visualization import Visualizer, VisualizerConfig, make_notifier

__all__ = [
    "StatusLogger",
    "setup_logging",
    "PerformanceMonitor",
    "Visualizer",
    "VisualizerConfig",
    "make_notifier",
]
