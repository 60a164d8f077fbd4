"""Matplotlib rendering of a simulation timeline."""

from __future__ import annotations

from typing import Any

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.colors import ListedColormap

from ..core.timeline import SimulationResult, Step
from ..simulation.navigator import TimelineNavigator
from ..simulation.statistics import step_statistics

FAULT_COLOR = "#f87171"
HIT_COLOR = "#34d399"
RATE_COLOR = "#fbbf24"

# cell categories
_PLAIN, _FAULT, _HIT = 0, 1, 2
_CELL_CMAP = ListedColormap(["#ffffff", FAULT_COLOR, HIT_COLOR])


class GridAdapter:
    """Presentation adapter that keeps the columns currently on screen.

    ``render`` appends a column and ``unrender`` drops the last one, the
    same way a table grows and shrinks as the learner steps through.
    """

    def __init__(self) -> None:
        self.columns: list[Step] = []

    def render(self, step: Step) -> None:
        self.columns.append(step)

    def unrender(self, step: Step) -> None:
        if self.columns and self.columns[-1] == step:
            self.columns.pop()
        else:
            raise ValueError(f"Step T{step.index} is not the last rendered column")

    def clear(self) -> None:
        self.columns.clear()


def cell_matrix(steps: list[Step] | tuple[Step, ...], frame_count: int) -> np.ndarray:
    """``(frame_count, len(steps))`` matrix of cell categories."""
    cells = np.full((frame_count, len(steps)), _PLAIN, dtype=int)
    for col, step in enumerate(steps):
        if step.is_fault and step.replaced_slot is not None:
            cells[step.replaced_slot, col] = _FAULT
        for slot in step.hit_slots:
            cells[slot, col] = _HIT
    return cells


class TimelineRenderer:
    """Draws the frame grid and performance chart of one result."""

    def __init__(self, result: SimulationResult) -> None:
        self.result = result

    def render_grid(
        self,
        upto: int | None = None,
        *,
        title: str | None = None,
        ax: Any = None,
    ) -> Any:
        """Frames x time table for the first *upto* steps (all by default)."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(10, 3))

        steps = self.result.steps[: len(self.result.steps) if upto is None else upto]
        frame_count = self.result.frame_count
        cells = cell_matrix(steps, frame_count)

        ax.clear()
        if steps:
            ax.imshow(cells, cmap=_CELL_CMAP, vmin=0, vmax=2, aspect="auto")
        for col, step in enumerate(steps):
            for slot, page in enumerate(step.frames_after):
                if page is not None:
                    ax.text(col, slot, str(page), ha="center", va="center", fontsize=9)

        ax.set_xticks(range(len(steps)))
        ax.set_xticklabels([f"T{s.index}" for s in steps], fontsize=8)
        ax.set_yticks(range(frame_count))
        ax.set_yticklabels([f"Frame {i + 1}" for i in range(frame_count)])
        ax.set_xticks(np.arange(-0.5, len(steps), 1), minor=True)
        ax.set_yticks(np.arange(-0.5, frame_count, 1), minor=True)
        ax.grid(which="minor", color="gray", linewidth=0.5)
        ax.tick_params(which="minor", length=0)
        ax.set_xlim(-0.5, max(len(self.result.steps), 1) - 0.5)
        ax.set_ylim(frame_count - 0.5, -0.5)

        faults = sum(1 for s in steps if s.is_fault)
        ax.set_title(title or f"{self.result.algorithm} — {faults} page faults")
        return ax

    def render_performance(self, *, title: str = "Page Replacement Performance Metrics", ax: Any = None) -> Any:
        """Per-step bars, cumulative counts and running fault rate."""
        if ax is None:
            _fig, ax = plt.subplots(1, 1, figsize=(10, 5))

        stats = step_statistics(self.result)
        x = stats.index.to_numpy()
        width = 0.4

        ax.bar(x - width / 2, stats["fault"], width, color=FAULT_COLOR, alpha=0.6, label="Page Faults per Step")
        ax.bar(x + width / 2, stats["hit"], width, color=HIT_COLOR, alpha=0.6, label="Page Hits per Step")
        ax.set_xlabel("Time (Steps)")
        ax.set_ylabel("Count")
        ax.set_xticks(x)
        ax.set_xticklabels([f"T{i}" for i in x], fontsize=8)

        cum_ax = ax.twinx()
        cum_ax.plot(x, stats["cumulative_faults"], color=FAULT_COLOR, label="Cumulative Page Faults")
        cum_ax.plot(x, stats["cumulative_hits"], color=HIT_COLOR, label="Cumulative Page Hits")
        cum_ax.set_ylabel("Cumulative Count")

        rate_ax = ax.twinx()
        rate_ax.spines["right"].set_position(("axes", 1.1))
        rate_ax.plot(x, stats["fault_rate"], color=RATE_COLOR, linestyle="--", label="Page Fault Rate (%)")
        rate_ax.set_ylim(0, 100)
        rate_ax.set_ylabel("Fault Rate (%)")

        handles, labels = [], []
        for a in (ax, cum_ax, rate_ax):
            h, lbl = a.get_legend_handles_labels()
            handles += h
            labels += lbl
        ax.legend(handles, labels, loc="upper left", fontsize=8)
        ax.set_title(title)
        return ax

    def animate(self, navigator: TimelineNavigator, interval_ms: int = 1000) -> FuncAnimation:
        """Animate playback by advancing *navigator* once per frame.

        The navigator should hold this renderer's result; its cursor
        decides how many columns are drawn.
        """
        fig, ax = plt.subplots(1, 1, figsize=(10, 3))
        self.render_grid(navigator.position, ax=ax)

        def update(_frame: int) -> Any:
            navigator.advance()
            self.render_grid(navigator.position, ax=ax)
            return (ax,)

        remaining = len(navigator.steps) - navigator.position
        return FuncAnimation(fig, update, frames=remaining, interval=interval_ms,
                             blit=False, repeat=False)
