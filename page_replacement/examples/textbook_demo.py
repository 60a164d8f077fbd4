"""Textbook comparison demo.

Runs all four policies on the classic reference string with three frames,
prints the fault table and saves the frame grids plus the FIFO
performance chart.
"""

from __future__ import annotations

import logging

import matplotlib.pyplot as plt

from .. import config
from ..simulation.engine import Algorithm, compare_algorithms, parse_references, run_simulation
from ..visualization.renderer import TimelineRenderer


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL)
    references = parse_references(config.DEFAULT_REFERENCES)
    frames = config.DEFAULT_FRAMES

    print(compare_algorithms(references, frames))

    fig, axes = plt.subplots(len(Algorithm), 1, figsize=(12, 3 * len(Algorithm)))
    for ax, algo in zip(axes, Algorithm):
        result = run_simulation(references, frames, algo)
        TimelineRenderer(result).render_grid(ax=ax, title=f"{algo.label}: {result.total_faults} faults")
    plt.tight_layout()
    plt.savefig("textbook_grids.png", dpi=150)

    fifo = run_simulation(references, frames, Algorithm.FIFO)
    TimelineRenderer(fifo).render_performance()
    plt.tight_layout()
    plt.savefig("textbook_performance.png", dpi=150)
    plt.show()


if __name__ == "__main__":
    main()
