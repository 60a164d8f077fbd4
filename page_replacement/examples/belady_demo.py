"""Belady's anomaly demo.

The reference string ``1 2 3 4 1 2 5 1 2 3 4 5`` makes FIFO fault *more*
with four frames than with three.  LRU and Optimal are stack algorithms
and never show the anomaly.
"""

from __future__ import annotations

import logging

import matplotlib.pyplot as plt

from .. import config
from ..simulation.engine import Algorithm, compare_algorithms

REFERENCES = (1, 2, 3, 4, 1, 2, 5, 1, 2, 3, 4, 5)


def fault_curve(algorithm: Algorithm, max_frames: int = 6) -> list[int]:
    """Total faults for 1..max_frames frames."""
    return [
        int(compare_algorithms(REFERENCES, n, [algorithm]).loc[algorithm.value, "faults"])
        for n in range(1, max_frames + 1)
    ]


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL)
    frames = list(range(1, 7))

    _fig, ax = plt.subplots(1, 1, figsize=(8, 5))
    for algo in Algorithm:
        ax.plot(frames, fault_curve(algo), marker="o", label=algo.label)
    ax.set_xlabel("Frames")
    ax.set_ylabel("Page faults")
    ax.set_title("Belady's anomaly")
    ax.legend()
    plt.savefig("belady_demo.png", dpi=150)
    plt.show()


if __name__ == "__main__":
    main()
