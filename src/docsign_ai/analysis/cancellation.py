"""Deadline-based cancellation for provider calls."""

import logging
import threading
import time
from typing import Callable, List, Optional


logger = logging.getLogger(__name__)


class CancellationToken:
    """
    A deadline shared by everything taking part in one provider call.

    Callbacks registered with ``on_cancel`` run once, either when
    ``cancel`` is called or when the deadline passes while the token is
    armed. The HTTP provider registers ``session.close`` so an expired
    call aborts its connection instead of being left to finish.
    """

    def __init__(self, timeout: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._timeout = timeout
        self._deadline = clock() + timeout
        self._cancelled = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        return self.cancelled or self.remaining() <= 0

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self._deadline - self._clock())

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """Register a callback to run when the token is cancelled."""
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def cancel(self) -> None:
        """Cancel the token and run registered callbacks."""
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Cancellation callback failed: {e}")

    def __enter__(self) -> "CancellationToken":
        remaining = self.remaining()
        if remaining <= 0:
            self.cancel()
        else:
            self._timer = threading.Timer(remaining, self.cancel)
            self._timer.daemon = True
            self._timer.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
