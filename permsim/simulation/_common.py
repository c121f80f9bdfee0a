"""
Common data structures for the Type I error simulation.

RejectionParams and SweepParams are the parameter payloads wrapped by
Result[P] and exposed through the solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from permsim.simulation.design import Scenario


DEFAULT_NREPS = 1000
DEFAULT_R = 999
DEFAULT_ALPHA = 0.05

# Share of replications allowed to fail with NumericDegeneracyError
# before the scenario itself is reported as failed.
DEFAULT_MAX_FAILURE_RATE = 0.5

# 'record': abort the replication, count it and continue.
# 'raise': the first degeneracy aborts the run.
ON_ERROR_CHOICES = ("record", "raise")


@dataclass(frozen=True)
class RejectionParams:
    """
    Parameter payload for one (scenario, variance assumption) simulation.

    - rejection_rate: n_rejected / n_completed, the empirical Type I error
    - p_values: p-values of completed replications, in replication order
    - failure_reasons: NumericDegeneracyError.reason -> count
    """
    rejection_rate: float
    n_rejected: int
    n_completed: int
    n_failed: int
    p_values: NDArray[np.floating[Any]]        # shape (n_completed,)
    failure_reasons: dict[str, int] = field(default_factory=dict)

    @property
    def monte_carlo_se(self) -> float:
        """Binomial standard error of the rejection rate."""
        r = self.rejection_rate
        return float(np.sqrt(r * (1.0 - r) / self.n_completed))


@dataclass(frozen=True)
class ScenarioResult:
    """One empirical rejection rate for a scenario and variance assumption."""
    scenario: 'Scenario'
    variance: str                               # "equal" | "unequal"
    rejection_rate: float
    n_rejected: int
    n_completed: int
    n_failed: int


@dataclass(frozen=True)
class SweepRow:
    """One row of the results table: a scenario and both rejection rates."""
    n1: int
    n2: int
    scale1: float
    scale2: float
    family: str
    shape: float
    equal_rate: float
    unequal_rate: float


@dataclass(frozen=True)
class SweepParams:
    """
    Parameter payload for a scenario sweep.

    - rows: one SweepRow per input scenario, input order preserved
    - results: every ScenarioResult, scenario-major, 'equal' before 'unequal'
    """
    rows: tuple[SweepRow, ...]
    results: tuple[ScenarioResult, ...]
    alpha: float
    nreps: int
    R: int
