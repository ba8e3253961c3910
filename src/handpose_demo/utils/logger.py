"""
Logging setup and the gesture status diagnostic channel.
"""

import os
import logging
import logging.handlers
import time
from typing import Optional


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class StatusLogger:
    """
    Logs gesture status transitions on the ``gesture_events`` logger.

    The status is re-evaluated every tick; only changes are logged so the
    console is not flooded at frame rate.
    """

    def __init__(self):
        self.logger = logging.getLogger("gesture_events")
        self._last_status: Optional[str] = None
        self._since = time.monotonic()
        self.transitions = 0

    def update(self, status: str) -> bool:
        """Record the current status. Returns True if it changed."""
        if status == self._last_status:
            return False
        now = time.monotonic()
        if self._last_status is not None:
            self.logger.info(
                "Status: %-30s | previous: %s (%.1fs)",
                status,
                self._last_status,
                now - self._since,
            )
        else:
            self.logger.info("Status: %s", status)
        self._last_status = status
        self._since = now
        self.transitions += 1
        return True

    @property
    def current(self) -> Optional[str]:
        return self._last_status
