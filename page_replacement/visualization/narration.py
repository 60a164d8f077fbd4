"""Plain-text descriptions of simulation steps."""

from __future__ import annotations

from ..core.timeline import Step

AWAITING = "Awaiting simulation..."


def describe_step(step: Step | None) -> str:
    if step is None:
        return AWAITING
    if step.is_fault:
        return (
            f"At time T{step.index}, page {step.page} caused a page fault "
            f"and was loaded into Frame {step.replaced_slot + 1}."
        )
    return f"At time T{step.index}, page {step.page} was already in memory (Hit)."


def cell_tooltip(step: Step, slot: int) -> str | None:
    """Tooltip for the cell at *slot* in *step*'s column, if it is marked."""
    page = step.frames_after[slot]
    if step.is_fault and step.replaced_slot == slot:
        return f"Page fault: Loaded page {page} into Frame {slot + 1}"
    if step.is_hit and slot in step.hit_slots:
        return f"Page hit: Page {page} was already in Frame {slot + 1}"
    return None
