"""
Performance Monitoring Module
==============================

Rolling tick rate and per-stage timings for the render loop.
"""

import time
import logging
from dataclasses import dataclass
from typing import Optional, Dict
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@dataclass
class PerformanceMetrics:
    """Snapshot of loop performance."""
    fps: float = 0.0
    tick_time_ms: float = 0.0
    capture_time_ms: float = 0.0
    detection_time_ms: float = 0.0
    react_time_ms: float = 0.0
    total_ticks: int = 0
    slow_ticks: int = 0


class PerformanceMonitor:
    """
    Tick timing for the render loop.
    
    Example:
        >>> monitor = PerformanceMonitor()
        >>> monitor.start()
        >>> 
        >>> while running:
        ...     monitor.tick_start()
        ...     with monitor.measure("capture"):
        ...         frame = camera.read()
        ...     with monitor.measure("detection"):
        ...         hands = detector.detect(frame.rgb)
        ...     monitor.tick_complete()
    """
    
    def __init__(self, window_size: int = 30, target_fps: float = 25.0):
        self.window_size = window_size
        self.target_fps = target_fps
        self._tick_times: deque = deque(maxlen=window_size)
        self._stage_times: Dict[str, deque] = {}
        self._tick_start: Optional[float] = None
        self._total_ticks = 0
        self._slow_ticks = 0
    
    def start(self) -> None:
        """Reset counters."""
        self._total_ticks = 0
        self._slow_ticks = 0
        self._tick_times.clear()
        self._stage_times.clear()
    
    def stop(self) -> None:
        logger.info(f"Performance monitor stopped. "
                    f"Total ticks: {self._total_ticks}, slow: {self._slow_ticks}")
    
    def tick_start(self) -> None:
        self._tick_start = time.perf_counter()
    
    def tick_complete(self) -> None:
        """Close the current tick and update the rolling window."""
        if self._tick_start is None:
            return
        
        tick_time = time.perf_counter() - self._tick_start
        self._tick_times.append(tick_time)
        self._total_ticks += 1
        if tick_time > (1.0 / self.target_fps):
            self._slow_ticks += 1
        self._tick_start = None
    
    @contextmanager
    def measure(self, stage: str):
        """Time a named stage of the current tick."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            if stage not in self._stage_times:
                self._stage_times[stage] = deque(maxlen=self.window_size)
            self._stage_times[stage].append(elapsed)
    
    @property
    def fps(self) -> float:
        """Rolling ticks per second."""
        if not self._tick_times:
            return 0.0
        avg = sum(self._tick_times) / len(self._tick_times)
        return 1.0 / avg if avg > 0 else 0.0
    
    @property
    def tick_time_ms(self) -> float:
        if not self._tick_times:
            return 0.0
        return (sum(self._tick_times) / len(self._tick_times)) * 1000
    
    def stage_time_ms(self, stage: str) -> float:
        times = self._stage_times.get(stage)
        if not times:
            return 0.0
        return (sum(times) / len(times)) * 1000
    
    @property
    def total_ticks(self) -> int:
        return self._total_ticks
    
    def get_metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics(
            fps=self.fps,
            tick_time_ms=self.tick_time_ms,
            capture_time_ms=self.stage_time_ms("capture"),
            detection_time_ms=self.stage_time_ms("detection"),
            react_time_ms=self.stage_time_ms("react"),
            total_ticks=self._total_ticks,
            slow_ticks=self._slow_ticks,
        )
    
    def get_report(self) -> str:
        """Formatted report for the console."""
        m = self.get_metrics()
        return (
            f"Performance Report\n"
            f"{'=' * 40}\n"
            f"FPS: {m.fps:.1f} (target: >={self.target_fps})\n"
            f"Tick time: {m.tick_time_ms:.1f}ms\n"
            f"\nPer-Stage Breakdown:\n"
            f"  Capture: {m.capture_time_ms:.2f}ms\n"
            f"  Detection: {m.detection_time_ms:.2f}ms\n"
            f"  React: {m.react_time_ms:.2f}ms\n"
            f"\nTicks: {m.total_ticks} "
            f"(slow: {m.slow_ticks}, {100 * m.slow_ticks / max(1, m.total_ticks):.1f}%)\n"
        )
