"""Cancellable repeating timers for auto-play.

A scheduler is any callable ``(interval_seconds, callback) -> handle``
where ``handle.cancel()`` stops further calls.  The navigator only ever
holds one handle at a time.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class RepeatingTimer:
    """Calls *callback* every *interval* seconds on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self._cancelled = threading.Event()
        self._thread = threading.Thread(target=self._run, name="autoplay", daemon=True)

    def start(self) -> RepeatingTimer:
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._cancelled.wait(self.interval):
            self.callback()

    def cancel(self) -> None:
        # No join: the callback may be the one cancelling, or be blocked on
        # a lock held by the caller.
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


def thread_scheduler(interval: float, callback: Callable[[], None]) -> RepeatingTimer:
    """Default scheduler: one background thread per timer."""
    logger.debug("Starting auto-play timer every %.3fs", interval)
    return RepeatingTimer(interval, callback).start()
