"""Simulation engine: input validation and algorithm dispatch.

The four policies are pure functions ``(references, frame_count) ->
SimulationResult``.  This module is the single entry point that checks the
inputs, resolves the algorithm token and runs the chosen policy to
completion before any playback starts.
"""

from __future__ import annotations

import logging
import numbers
import re
from enum import Enum
from typing import Any, Callable, Iterable, Sequence

import pandas as pd

from ..algorithms.fifo import simulate_fifo
from ..algorithms.lru import simulate_lru
from ..algorithms.optimal import simulate_optimal
from ..algorithms.second_chance import simulate_modified_fifo
from ..core.errors import InvalidInput, UnknownAlgorithm
from ..core.timeline import SimulationResult

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    FIFO = "FIFO"
    MODIFIED_FIFO = "ModifiedFIFO"
    LRU = "LRU"
    OPTIMAL = "Optimal"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, token: Any) -> Algorithm:
        """Resolve *token* to an :class:`Algorithm`.

        Exact token match first, then case-insensitive.  Never falls back
        to a default policy.
        """
        if isinstance(token, cls):
            return token
        if isinstance(token, str):
            for algo in cls:
                if algo.value == token:
                    return algo
            folded = token.strip().casefold()
            for algo in cls:
                if algo.value.casefold() == folded:
                    return algo
        raise UnknownAlgorithm(token)


_LABELS = {
    Algorithm.FIFO: "First-In First-Out",
    Algorithm.MODIFIED_FIFO: "Second Chance (Modified FIFO)",
    Algorithm.LRU: "Least Recently Used",
    Algorithm.OPTIMAL: "Optimal",
}

ALGORITHMS: dict[Algorithm, Callable[[Sequence[int], int], SimulationResult]] = {
    Algorithm.FIFO: simulate_fifo,
    Algorithm.MODIFIED_FIFO: simulate_modified_fifo,
    Algorithm.LRU: simulate_lru,
    Algorithm.OPTIMAL: simulate_optimal,
}


# ── Input validation ────────────────────────────────────────────────

def _as_page(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"Page reference must be an integer, got {value!r}")
    if isinstance(value, numbers.Integral):
        page = int(value)
    elif isinstance(value, numbers.Real) and float(value).is_integer():
        page = int(value)
    else:
        raise InvalidInput(f"Page reference must be an integer, got {value!r}")
    if page < 0:
        raise InvalidInput(f"Page reference must be non-negative, got {page}")
    return page


def _as_frame_count(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidInput(f"Frame count must be an integer, got {value!r}")
    if value <= 0:
        raise InvalidInput(f"Frame count must be positive, got {value}")
    return int(value)


def validate_inputs(references: Iterable[Any], frame_count: Any) -> tuple[tuple[int, ...], int]:
    """Normalise and check the simulation inputs.

    Raises :class:`InvalidInput` for an empty or non-numeric reference
    sequence, a negative page, or a non-positive frame count.
    """
    if isinstance(references, (str, bytes)):
        raise InvalidInput("Page references must be a sequence of integers, not text")
    try:
        items = iter(references)
    except TypeError:
        raise InvalidInput(
            f"Page references must be a sequence of integers, got {references!r}"
        ) from None
    pages = tuple(_as_page(v) for v in items)
    if not pages:
        raise InvalidInput("Page reference sequence is empty")
    return pages, _as_frame_count(frame_count)


_SEPARATORS = re.compile(r"[\s,]+")


def parse_references(text: str) -> tuple[int, ...]:
    """Parse free text such as ``"7 0 1 2"`` or ``"7,0,1,2"``."""
    tokens = [t for t in _SEPARATORS.split(text or "") if t]
    if not tokens:
        raise InvalidInput("Page reference sequence is empty")
    pages = []
    for token in tokens:
        try:
            pages.append(int(token))
        except ValueError:
            raise InvalidInput(f"Invalid page reference: {token!r}") from None
    return validate_inputs(pages, 1)[0]


def parse_frame_count(value: Any) -> int:
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidInput(f"Invalid frame count: {value!r}") from None
    return _as_frame_count(value)


# ── Running ─────────────────────────────────────────────────────────

def run_simulation(
    references: Iterable[Any],
    frame_count: Any,
    algorithm: Algorithm | str,
) -> SimulationResult:
    """Run one algorithm over the full reference sequence.

    The whole history is computed synchronously; nothing is returned on
    invalid input.
    """
    algo = Algorithm.parse(algorithm)
    pages, frames = validate_inputs(references, frame_count)
    result = ALGORITHMS[algo](pages, frames)
    logger.info(
        "%s: %d references, %d frames -> %d faults",
        algo.value, len(pages), frames, result.total_faults,
    )
    return result


def compare_algorithms(
    references: Iterable[Any],
    frame_count: Any,
    algorithms: Iterable[Algorithm | str] | None = None,
) -> pd.DataFrame:
    """Run several algorithms on the same input and tabulate the outcome."""
    pages, frames = validate_inputs(references, frame_count)
    selected = [Algorithm.parse(a) for a in algorithms] if algorithms is not None else list(Algorithm)
    order = list(Algorithm)
    selected.sort(key=order.index)

    rows = []
    for algo in selected:
        result = run_simulation(pages, frames, algo)
        rows.append({
            "algorithm": algo.value,
            "faults": result.total_faults,
            "hits": result.total_hits,
            "fault_rate": result.fault_rate,
            "hit_rate": result.hit_rate,
        })
    return pd.DataFrame(rows, columns=["algorithm", "faults", "hits", "fault_rate", "hit_rate"]).set_index("algorithm")
