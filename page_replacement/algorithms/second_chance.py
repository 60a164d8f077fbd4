"""Second-Chance (modified FIFO) replacement.

FIFO with one reference bit per slot.  A hit sets the bit; on a fault the
pointer sweeps forward clearing set bits ("second chances") until it finds
a slot whose bit is already clear, which becomes the victim.
"""

from __future__ import annotations

from typing import Sequence

from ..core.timeline import SimulationResult, TimelineBuilder


def find_victim(reference_bits: list[int], pointer: int) -> int:
    """Sweep from *pointer* and return the victim slot.

    Clears every set bit it passes.  When every bit is set the sweep makes
    one full rotation and the victim is the start slot.
    """
    frame_count = len(reference_bits)
    while reference_bits[pointer] == 1:
        reference_bits[pointer] = 0
        pointer = (pointer + 1) % frame_count
    return pointer


def simulate_modified_fifo(references: Sequence[int], frame_count: int) -> SimulationResult:
    """Second-Chance replacement over *frame_count* slots."""
    timeline = TimelineBuilder(frame_count, algorithm="ModifiedFIFO")
    reference_bits = [0] * frame_count
    pointer = 0

    for page in references:
        slot = timeline.slot_of(page)
        if slot is not None:
            reference_bits[slot] = 1
            timeline.hit(page, slot)
            continue

        victim = find_victim(reference_bits, pointer)
        timeline.load(page, victim)
        reference_bits[victim] = 0
        pointer = (victim + 1) % frame_count

    return timeline.build()
