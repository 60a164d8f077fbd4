"""Console playback demo.

Auto-plays an LRU simulation on a background timer, printing the
narration for each step, then walks it back to the start.
"""

from __future__ import annotations

import logging
import time

from .. import config
from ..core.timeline import Step
from ..simulation.engine import Algorithm, parse_references, run_simulation
from ..simulation.navigator import TimelineNavigator
from ..visualization.narration import describe_step


class ConsoleAdapter:
    def render(self, step: Step) -> None:
        frames = " ".join("-" if p is None else str(p) for p in step.frames_after)
        print(f"[{frames}]  {describe_step(step)}")

    def unrender(self, step: Step) -> None:
        print(f"undo T{step.index}")


def main() -> None:
    logging.basicConfig(level=config.LOG_LEVEL)
    result = run_simulation(parse_references(config.DEFAULT_REFERENCES), config.DEFAULT_FRAMES, Algorithm.LRU)

    navigator = TimelineNavigator(ConsoleAdapter())
    navigator.reset(result)
    navigator.toggle_play(interval_ms=300)
    while navigator.is_playing:
        time.sleep(0.1)

    print(f"Total page faults: {result.total_faults}")
    while navigator.retreat() is not None:
        pass


if __name__ == "__main__":
    main()
