"""Step history produced by a page replacement simulation.

Every algorithm records its decisions through a :class:`TimelineBuilder`,
which snapshots the frame table after each reference and counts faults.
The resulting :class:`SimulationResult` is immutable and is the only thing
the navigator and the presentation layer ever see.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

FrameState = tuple[Optional[int], ...]

EMPTY = None


@dataclass(frozen=True)
class Step:
    """One processed reference.

    ``replaced_slot`` is the slot written on a fault (``None`` on hits);
    ``hit_slots`` lists the slots that already held the page (empty on
    faults).
    """

    index: int
    page: int
    frames_after: FrameState
    is_fault: bool
    replaced_slot: int | None = None
    hit_slots: tuple[int, ...] = ()

    @property
    def is_hit(self) -> bool:
        return not self.is_fault

    @property
    def frame_count(self) -> int:
        return len(self.frames_after)


@dataclass(frozen=True)
class SimulationResult:
    """Full, precomputed history of one simulation."""

    steps: tuple[Step, ...]
    total_faults: int
    algorithm: str = ""
    frame_count: int = 0

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    @property
    def total_hits(self) -> int:
        return len(self.steps) - self.total_faults

    @property
    def fault_rate(self) -> float:
        if not self.steps:
            return 0.0
        return self.total_faults / len(self.steps)

    @property
    def hit_rate(self) -> float:
        if not self.steps:
            return 0.0
        return self.total_hits / len(self.steps)

    @property
    def references(self) -> tuple[int, ...]:
        return tuple(s.page for s in self.steps)


class TimelineBuilder:
    """Mutable frame table plus the step log built from it.

    Algorithms decide *which* slot to touch; the builder applies the
    write, snapshots the frames and keeps the fault count consistent.
    """

    def __init__(self, frame_count: int, algorithm: str = "") -> None:
        self.frames: list[int | None] = [EMPTY] * frame_count
        self.algorithm = algorithm
        self._steps: list[Step] = []
        self._faults = 0

    def slot_of(self, page: int) -> int | None:
        """Return the slot holding *page*, or ``None`` if not resident."""
        try:
            return self.frames.index(page)
        except ValueError:
            return None

    def first_empty(self) -> int | None:
        for slot, page in enumerate(self.frames):
            if page is EMPTY:
                return slot
        return None

    def hit(self, page: int, slot: int) -> Step:
        step = Step(
            index=len(self._steps) + 1,
            page=page,
            frames_after=tuple(self.frames),
            is_fault=False,
            replaced_slot=None,
            hit_slots=(slot,),
        )
        self._steps.append(step)
        return step

    def load(self, page: int, slot: int) -> Step:
        """Write *page* into *slot* and record the fault."""
        self.frames[slot] = page
        self._faults += 1
        step = Step(
            index=len(self._steps) + 1,
            page=page,
            frames_after=tuple(self.frames),
            is_fault=True,
            replaced_slot=slot,
            hit_slots=(),
        )
        self._steps.append(step)
        return step

    def build(self) -> SimulationResult:
        return SimulationResult(
            steps=tuple(self._steps),
            total_faults=self._faults,
            algorithm=self.algorithm,
            frame_count=len(self.frames),
        )
