"""FIFO: evict pages in the order they were loaded.

A circular write pointer always designates the oldest-loaded (or
never-filled) slot, independent of how recently pages were used.
"""

from __future__ import annotations

from typing import Sequence

from ..core.timeline import SimulationResult, TimelineBuilder


def simulate_fifo(references: Sequence[int], frame_count: int) -> SimulationResult:
    """First-In First-Out replacement.

    Empty slots are filled in ascending order before the pointer wraps,
    since an empty slot is never a hit and always a valid target.
    """
    timeline = TimelineBuilder(frame_count, algorithm="FIFO")
    pointer = 0

    for page in references:
        slot = timeline.slot_of(page)
        if slot is not None:
            timeline.hit(page, slot)
            continue
        timeline.load(page, pointer)
        pointer = (pointer + 1) % frame_count

    return timeline.build()
