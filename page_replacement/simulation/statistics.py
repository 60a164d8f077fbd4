"""Per-step fault/hit statistics for the performance chart."""

from __future__ import annotations

import numpy as np
import pandas as pd

from ..core.timeline import SimulationResult

COLUMNS = ["page", "fault", "hit", "cumulative_faults", "cumulative_hits", "fault_rate"]


def step_statistics(result: SimulationResult) -> pd.DataFrame:
    """One row per step, indexed by the 1-based step number.

    ``fault_rate`` is the running fault percentage up to and including
    each step.
    """
    if not result.steps:
        return pd.DataFrame(columns=COLUMNS).rename_axis("step")

    index = np.array([s.index for s in result.steps])
    faults = np.array([1 if s.is_fault else 0 for s in result.steps])
    hits = 1 - faults
    cumulative_faults = np.cumsum(faults)
    cumulative_hits = np.cumsum(hits)
    fault_rate = cumulative_faults / np.arange(1, len(faults) + 1) * 100.0

    return pd.DataFrame(
        {
            "page": [s.page for s in result.steps],
            "fault": faults,
            "hit": hits,
            "cumulative_faults": cumulative_faults,
            "cumulative_hits": cumulative_hits,
            "fault_rate": fault_rate,
        },
        index=pd.Index(index, name="step"),
    )

