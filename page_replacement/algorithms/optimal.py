"""Optimal (Belady) replacement.

Evicts the resident page whose next use lies furthest in the future.
This needs the whole reference string up front, so it is a baseline for
the other policies rather than something a real kernel can run.
"""

from __future__ import annotations

import math
from typing import Sequence

from ..core.timeline import SimulationResult, TimelineBuilder


def next_use(references: Sequence[int], page: int, after: int) -> float:
    """Index of the next occurrence of *page* past position *after*.

    Returns ``math.inf`` when the page is never referenced again.
    """
    for i in range(after + 1, len(references)):
        if references[i] == page:
            return i
    return math.inf


def furthest_slot(frames: list[int | None], references: Sequence[int], position: int) -> int:
    """Slot whose page is needed furthest ahead, lowest slot index on ties."""
    best_slot = 0
    best_distance = -1.0
    for slot, page in enumerate(frames):
        distance = next_use(references, page, position)
        # strict '>' keeps the lowest slot on ties, including inf vs inf
        if distance > best_distance:
            best_slot, best_distance = slot, distance
    return best_slot


def simulate_optimal(references: Sequence[int], frame_count: int) -> SimulationResult:
    """Optimal replacement over *frame_count* slots."""
    timeline = TimelineBuilder(frame_count, algorithm="Optimal")

    for position, page in enumerate(references):
        slot = timeline.slot_of(page)
        if slot is not None:
            timeline.hit(page, slot)
            continue

        target = timeline.first_empty()
        if target is None:
            target = furthest_slot(timeline.frames, references, position)
        timeline.load(page, target)

    return timeline.build()
