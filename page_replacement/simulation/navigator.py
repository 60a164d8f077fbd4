"""Timeline navigator: a reversible cursor over a precomputed history.

The navigator owns the cursor and the auto-play timer for one displayed
simulation.  It never computes anything itself; it only tells a
presentation adapter which step to render or un-render.

States are ``{IDLE, MID, END} x {playing, paused}``.  ``advance`` moves
towards END, ``retreat`` towards IDLE, reaching END while playing pauses,
and ``reset`` always lands on ``(IDLE, paused)``.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Protocol

from ..core.timeline import SimulationResult, Step
from .scheduler import Scheduler, TimerHandle, thread_scheduler

logger = logging.getLogger(__name__)


class Phase(Enum):
    IDLE = "idle"
    MID = "mid"
    END = "end"


class PresentationAdapter(Protocol):
    def render(self, step: Step) -> None: ...

    def unrender(self, step: Step) -> None: ...


_EMPTY_RESULT = SimulationResult(steps=(), total_faults=0)


class TimelineNavigator:
    """Step forward and backward through a :class:`SimulationResult`."""

    def __init__(
        self,
        adapter: PresentationAdapter | None = None,
        scheduler: Scheduler = thread_scheduler,
    ) -> None:
        self.adapter = adapter
        self.scheduler = scheduler
        self._result = _EMPTY_RESULT
        self._position = 0
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def result(self) -> SimulationResult:
        return self._result

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._result.steps

    @property
    def position(self) -> int:
        return self._position

    @property
    def current_step(self) -> Step | None:
        """The most recently rendered step, ``None`` before the first."""
        if self._position == 0:
            return None
        return self.steps[self._position - 1]

    @property
    def can_advance(self) -> bool:
        return self._position < len(self.steps)

    @property
    def can_retreat(self) -> bool:
        return self._position > 0

    @property
    def is_playing(self) -> bool:
        return self._timer is not None

    @property
    def phase(self) -> Phase:
        if self._position == 0:
            return Phase.IDLE
        if self._position >= len(self.steps):
            return Phase.END
        return Phase.MID

    @property
    def state(self) -> tuple[Phase, bool]:
        return self.phase, self.is_playing

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def reset(self, result: SimulationResult | None = None) -> None:
        """Load *result* (or rewind the current one) and return to IDLE.

        A running auto-play timer is cancelled first so two advance loops
        can never compete.
        """
        with self._lock:
            self.stop()
            if result is not None:
                self._result = result
            self._position = 0
            clear = getattr(self.adapter, "clear", None)
            if callable(clear):
                clear()
        logger.info(
            "Navigator reset: %s, %d steps", self._result.algorithm or "-", len(self.steps)
        )

    def advance(self) -> Step | None:
        """Render the next step; ``None`` when already at the end."""
        with self._lock:
            if not self.can_advance:
                return None
            step = self.steps[self._position]
            if self.adapter is not None:
                self.adapter.render(step)
            self._position += 1
            logger.debug("advance -> %d/%d", self._position, len(self.steps))
            return step

    def retreat(self) -> Step | None:
        """Un-render the last rendered step; ``None`` when at the start."""
        with self._lock:
            if not self.can_retreat:
                return None
            self._position -= 1
            step = self.steps[self._position]
            if self.adapter is not None:
                self.adapter.unrender(step)
            logger.debug("retreat -> %d/%d", self._position, len(self.steps))
            return step

    def seek(self, position: int) -> int:
        """Move one step at a time until the cursor reaches *position*."""
        with self._lock:
            target = max(0, min(position, len(self.steps)))
            while self._position < target:
                self.advance()
            while self._position > target:
                self.retreat()
            return self._position

    # ------------------------------------------------------------------
    # Auto-play
    # ------------------------------------------------------------------

    def toggle_play(self, interval_ms: int = 1000) -> bool:
        """Start or cancel auto-play.  Returns whether it is now playing."""
        with self._lock:
            if self._timer is not None:
                self.stop()
                return False
            if not self.can_advance:
                return False
            self._generation += 1
            generation = self._generation
            self._timer = self.scheduler(interval_ms / 1000.0, lambda: self._tick(generation))
            logger.debug("Auto-play started (%d ms)", interval_ms)
            return True

    def stop(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()
            logger.debug("Auto-play stopped at %d/%d", self._position, len(self.steps))

    def _tick(self, generation: int) -> None:
        with self._lock:
            # a tick from an already cancelled timer
            if self._timer is None or generation != self._generation:
                return
            try:
                self.advance()
            except Exception:
                logger.exception("Auto-play step failed, pausing")
                self.stop()
                raise
            if not self.can_advance:
                self.stop()
