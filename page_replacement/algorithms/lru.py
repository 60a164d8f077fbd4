"""Least-Recently-Used replacement.

Only the minimum "last used" time is ever queried, so a per-slot
timestamp is enough; no ordering structure is kept.
"""

from __future__ import annotations

from typing import Sequence

from ..core.timeline import SimulationResult, TimelineBuilder


def least_recent_slot(last_used: list[int]) -> int:
    """Slot with the smallest timestamp, lowest slot index on ties."""
    return min(range(len(last_used)), key=lambda s: (last_used[s], s))


def simulate_lru(references: Sequence[int], frame_count: int) -> SimulationResult:
    """LRU replacement over *frame_count* slots."""
    timeline = TimelineBuilder(frame_count, algorithm="LRU")
    last_used = [0] * frame_count

    for now, page in enumerate(references, start=1):
        slot = timeline.slot_of(page)
        if slot is not None:
            last_used[slot] = now
            timeline.hit(page, slot)
            continue

        target = timeline.first_empty()
        if target is None:
            target = least_recent_slot(last_used)
        timeline.load(page, target)
        last_used[target] = now

    return timeline.build()
