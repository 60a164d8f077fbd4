"""Tests for the timeline navigator and auto-play timers."""

from __future__ import annotations

import time

import pytest

from page_replacement.core.errors import InvalidInput
from page_replacement.core.timeline import SimulationResult, Step
from page_replacement.simulation.engine import run_simulation
from page_replacement.simulation.navigator import Phase, TimelineNavigator
from page_replacement.simulation.scheduler import RepeatingTimer, thread_scheduler

TEXTBOOK = [7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2]


# ── Helpers ──────────────────────────────────────────────────────────

class RecordingAdapter:
    def __init__(self) -> None:
        self.events: list[tuple[str, int]] = []
        self.cleared = 0

    def render(self, step: Step) -> None:
        self.events.append(("render", step.index))

    def unrender(self, step: Step) -> None:
        self.events.append(("unrender", step.index))

    def clear(self) -> None:
        self.cleared += 1


class ManualTimer:
    def __init__(self, interval: float, callback) -> None:
        self.interval = interval
        self.callback = callback
        self.cancelled = False

    def fire(self) -> None:
        if not self.cancelled:
            self.callback()

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, interval: float, callback) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]


def _failing_render(step: Step) -> None:
    raise RuntimeError(f"cannot draw T{step.index}")


def _navigator(refs=TEXTBOOK, frames=3, algorithm="FIFO"):
    adapter = RecordingAdapter()
    scheduler = ManualScheduler()
    nav = TimelineNavigator(adapter, scheduler=scheduler)
    nav.reset(run_simulation(refs, frames, algorithm))
    return nav, adapter, scheduler


# ── Stepping ─────────────────────────────────────────────────────────

class TestStepping:
    def test_reset_state(self):
        nav, adapter, _ = _navigator()
        assert nav.position == 0
        assert nav.state == (Phase.IDLE, False)
        assert nav.can_advance
        assert not nav.can_retreat
        assert nav.current_step is None
        assert adapter.cleared == 1

    def test_empty_navigator(self):
        nav = TimelineNavigator()
        assert not nav.can_advance
        assert not nav.can_retreat
        assert nav.advance() is None
        assert nav.retreat() is None

    def test_advance_renders_in_order(self):
        nav, adapter, _ = _navigator()
        first = nav.advance()
        assert first.index == 1
        assert nav.position == 1
        assert nav.phase is Phase.MID
        assert nav.current_step is first
        assert adapter.events == [("render", 1)]

    def test_full_round_trip(self):
        """Forward then backward returns to 0; un-renders mirror renders."""
        nav, adapter, _ = _navigator()
        n = len(nav.steps)
        for _ in range(n):
            nav.advance()
        assert nav.phase is Phase.END
        for _ in range(n):
            nav.retreat()
        assert nav.position == 0
        assert nav.phase is Phase.IDLE

        rendered = [i for kind, i in adapter.events if kind == "render"]
        unrendered = [i for kind, i in adapter.events if kind == "unrender"]
        assert rendered == list(range(1, n + 1))
        assert unrendered == list(reversed(rendered))

    def test_advance_at_end_is_noop(self):
        nav, adapter, _ = _navigator([1, 2], 1)
        nav.advance()
        nav.advance()
        assert nav.advance() is None
        assert nav.position == 2
        assert len(adapter.events) == 2

    def test_retreat_at_start_is_noop(self):
        nav, adapter, _ = _navigator()
        assert nav.retreat() is None
        assert nav.position == 0
        assert adapter.events == []

    def test_retreat_unrenders_step_beyond_cursor(self):
        nav, adapter, _ = _navigator()
        nav.advance()
        nav.advance()
        step = nav.retreat()
        assert step.index == 2
        assert nav.position == 1
        assert adapter.events[-1] == ("unrender", 2)

    def test_seek(self):
        nav, adapter, _ = _navigator()
        assert nav.seek(5) == 5
        assert nav.seek(2) == 2
        assert nav.seek(99) == len(nav.steps)
        assert nav.seek(-1) == 0
        assert adapter.events[:5] == [("render", i) for i in range(1, 6)]

    def test_reset_with_new_result(self):
        nav, _adapter, _ = _navigator()
        nav.seek(4)
        other = run_simulation([1, 2, 3], 2, "LRU")
        nav.reset(other)
        assert nav.result is other
        assert nav.position == 0
        assert nav.state == (Phase.IDLE, False)

    def test_reset_without_result_rewinds(self):
        nav, _adapter, _ = _navigator()
        result = nav.result
        nav.seek(4)
        nav.reset()
        assert nav.result is result
        assert nav.position == 0

    def test_failed_start_leaves_navigator_untouched(self):
        nav, adapter, _ = _navigator()
        nav.seek(3)
        before = (nav.result, nav.position, list(adapter.events))
        with pytest.raises(InvalidInput):
            nav.reset(run_simulation([], 3, "FIFO"))
        assert (nav.result, nav.position, adapter.events) == before

    def test_adapter_optional(self):
        nav = TimelineNavigator(scheduler=ManualScheduler())
        nav.reset(SimulationResult(steps=run_simulation([1], 1, "FIFO").steps, total_faults=1))
        assert nav.advance().page == 1


# ── Auto-play ────────────────────────────────────────────────────────

class TestAutoPlay:
    def test_toggle_starts_single_timer(self):
        nav, _adapter, scheduler = _navigator()
        assert nav.toggle_play(500) is True
        assert nav.is_playing
        assert len(scheduler.timers) == 1
        assert scheduler.timers[0].interval == pytest.approx(0.5)

    def test_plays_to_end_then_pauses(self):
        nav, _adapter, scheduler = _navigator()
        nav.toggle_play(100)
        timer = scheduler.timers[0]
        for _ in range(len(nav.steps)):
            timer.fire()
        assert nav.state == (Phase.END, False)
        assert timer.cancelled
        assert scheduler.active == []

    def test_toggle_again_cancels(self):
        nav, _adapter, scheduler = _navigator()
        nav.toggle_play()
        scheduler.timers[0].fire()
        assert nav.toggle_play() is False
        assert not nav.is_playing
        assert scheduler.timers[0].cancelled
        assert nav.position == 1

    def test_no_play_at_end(self):
        nav, _adapter, scheduler = _navigator([1], 1)
        nav.advance()
        assert nav.toggle_play() is False
        assert scheduler.timers == []

    def test_reset_cancels_timer(self):
        nav, _adapter, scheduler = _navigator()
        nav.toggle_play()
        nav.reset(run_simulation([4, 5], 2, "LRU"))
        assert not nav.is_playing
        assert scheduler.active == []
        assert nav.state == (Phase.IDLE, False)

    def test_at_most_one_timer(self):
        nav, _adapter, scheduler = _navigator()
        nav.toggle_play()
        nav.toggle_play()
        nav.toggle_play()
        assert len(scheduler.active) == 1

    def test_stale_tick_ignored(self):
        """A tick from a cancelled timer never moves the cursor."""
        nav, _adapter, scheduler = _navigator()
        nav.toggle_play()
        old = scheduler.timers[0]
        nav.stop()
        nav.toggle_play()
        old.callback()
        assert nav.position == 0
        scheduler.timers[1].fire()
        assert nav.position == 1

    def test_manual_steps_while_playing(self):
        nav, _adapter, scheduler = _navigator()
        nav.toggle_play()
        nav.advance()
        nav.retreat()
        assert nav.state == (Phase.IDLE, True)
        scheduler.timers[0].fire()
        assert nav.position == 1

    def test_render_error_pauses(self):
        """A failing adapter during auto-play leaves the navigator paused."""
        nav, adapter, scheduler = _navigator()
        nav.toggle_play()
        adapter.render = _failing_render
        with pytest.raises(RuntimeError):
            scheduler.timers[0].fire()
        assert nav.state == (Phase.IDLE, False)
        assert scheduler.active == []
        assert nav.toggle_play() is True


class TestRepeatingTimer:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            RepeatingTimer(0, lambda: None)

    def test_fires_until_cancelled(self):
        calls = []
        timer = thread_scheduler(0.01, lambda: calls.append(1))
        deadline = time.monotonic() + 2.0
        while len(calls) < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        timer.cancel()
        assert timer.cancelled
        assert len(calls) >= 3
        time.sleep(0.05)
        settled = len(calls)
        time.sleep(0.05)
        assert len(calls) == settled

    def test_navigator_plays_on_thread(self):
        adapter = RecordingAdapter()
        nav = TimelineNavigator(adapter)
        nav.reset(run_simulation(TEXTBOOK, 3, "Optimal"))
        nav.toggle_play(10)
        deadline = time.monotonic() + 5.0
        while nav.is_playing and time.monotonic() < deadline:
            time.sleep(0.01)
        assert nav.state == (Phase.END, False)
        assert [i for _kind, i in adapter.events] == list(range(1, len(TEXTBOOK) + 1))

    @pytest.mark.filterwarnings("ignore::pytest.PytestUnhandledThreadExceptionWarning")
    def test_render_error_on_thread_pauses(self):
        adapter = RecordingAdapter()
        adapter.render = _failing_render
        nav = TimelineNavigator(adapter)
        nav.reset(run_simulation(TEXTBOOK, 3, "FIFO"))
        nav.toggle_play(10)
        deadline = time.monotonic() + 5.0
        while nav.is_playing and time.monotonic() < deadline:
            time.sleep(0.01)
        assert nav.state == (Phase.IDLE, False)
