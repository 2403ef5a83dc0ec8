"""Cancelable periodic task used for auto refreshing views."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class PeriodicRefresh:
    """Run ``callback`` every ``interval`` seconds on a daemon thread.

    The task is bound to the object that owns it: ``cancel()`` (or leaving the
    ``with`` block) stops new cycles from being scheduled. A cycle that is
    already running is allowed to finish; it is never interrupted.
    """

    def __init__(self, callback: Callable[[], None], interval: float) -> None:
        if interval <= 0:
            raise ValueError("Refresh interval must be positive.")
        self.callback = callback
        self.interval = interval
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        """True while cycles are still being scheduled."""
        return self._thread is not None and not self._stopped.is_set()

    def start(self) -> None:
        """Start scheduling cycles. Starting twice is a no-op."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run, name="periodic-refresh", daemon=True
        )
        self._thread.start()

    def cancel(self, wait: bool = False) -> None:
        """Stop scheduling cycles, optionally waiting for the thread to exit."""
        self._stopped.set()
        thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join()

    def _run(self) -> None:
        # wait() returns True as soon as cancel() is called
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Periodic refresh cycle failed: {e}")

    def __enter__(self) -> PeriodicRefresh:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel(wait=True)
