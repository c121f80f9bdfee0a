"""
Solution wrappers for simulation results.

SimulationSolution wraps Result[RejectionParams] for one scenario and
variance assumption; SweepSolution wraps Result[SweepParams] and renders
the results table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from permsim.core.result import Result
from permsim.simulation._common import (
    RejectionParams,
    ScenarioResult,
    SweepParams,
    SweepRow,
)

if TYPE_CHECKING:
    from permsim.simulation.design import Scenario, SimulationDesign, SweepDesign


@dataclass
class SimulationSolution:
    """
    User-facing result of one Type I error simulation.

    rejection_rate is the share of completed replications with p < alpha.
    """
    _result: Result[RejectionParams]
    _design: 'SimulationDesign'

    # --- Core fields ---

    @property
    def rejection_rate(self) -> float:
        """Empirical Type I error rate."""
        return self._result.params.rejection_rate

    @property
    def monte_carlo_se(self) -> float:
        """Binomial standard error of rejection_rate."""
        return self._result.params.monte_carlo_se

    @property
    def n_rejected(self) -> int:
        return self._result.params.n_rejected

    @property
    def n_completed(self) -> int:
        return self._result.params.n_completed

    @property
    def n_failed(self) -> int:
        """Replications aborted by NumericDegeneracyError."""
        return self._result.params.n_failed

    @property
    def failure_reasons(self) -> dict[str, int]:
        return self._result.params.failure_reasons

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """p-values of completed replications, in replication order."""
        return self._result.params.p_values

    # --- Metadata ---

    @property
    def scenario(self) -> 'Scenario':
        return self._design.scenario

    @property
    def var_equal(self) -> bool:
        return self._design.var_equal

    @property
    def alpha(self) -> float:
        return self._design.alpha

    @property
    def nreps(self) -> int:
        return self._design.nreps

    @property
    def R(self) -> int:
        return self._design.R

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """Simulation summary."""
        statistic = "pooled t" if self.var_equal else "Welch t"
        lines = [
            "\nTYPE I ERROR SIMULATION",
            "",
            f"Scenario: {self._design.label()}",
            f"Statistic: {statistic} (R = {self.R} permutations)",
            f"Replications: {self.n_completed} completed, {self.n_failed} failed",
            f"Rejection rate at alpha = {self.alpha:g}: "
            f"{self.rejection_rate:.4f} (MC s.e. {self.monte_carlo_se:.4f})",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SimulationSolution(rate={self.rejection_rate:.4f}, "
            f"nreps={self.nreps}, var_equal={self.var_equal}, "
            f"backend={self.backend_name!r})"
        )


@dataclass
class SweepSolution:
    """
    User-facing scenario sweep results.

    rows holds one entry per input scenario, in input order, with the
    equal-variance and unequal-variance rejection rates side by side.
    """
    _result: Result[SweepParams]
    _design: 'SweepDesign'

    @property
    def rows(self) -> tuple[SweepRow, ...]:
        return self._result.params.rows

    @property
    def results(self) -> tuple[ScenarioResult, ...]:
        """Every (scenario, variance) result, scenario-major."""
        return self._result.params.results

    @property
    def table(self) -> NDArray[np.floating[Any]]:
        """Rejection rates, shape (n_scenarios, 2): equal, unequal."""
        return np.array(
            [[r.equal_rate, r.unequal_rate] for r in self.rows],
            dtype=np.float64,
        )

    @property
    def scenarios(self) -> tuple['Scenario', ...]:
        return self._design.scenarios

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

    @property
    def nreps(self) -> int:
        return self._result.params.nreps

    @property
    def R(self) -> int:
        return self._result.params.R

    @property
    def n_failed(self) -> int:
        return self._result.info['n_failed']

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def to_frame(self):
        """
        Results table as a pandas DataFrame, one row per scenario.

        Columns: n1, n2, scale1, scale2, family, shape, equal_rate,
        unequal_rate.
        """
        import pandas as pd

        return pd.DataFrame(
            [
                {
                    'n1': r.n1,
                    'n2': r.n2,
                    'scale1': r.scale1,
                    'scale2': r.scale2,
                    'family': r.family,
                    'shape': r.shape,
                    'equal_rate': r.equal_rate,
                    'unequal_rate': r.unequal_rate,
                }
                for r in self.rows
            ]
        )

    def summary(self) -> str:
        """
        Fixed-width results table.

        Produces:
            EMPIRICAL TYPE I ERROR (alpha = 0.05, nreps = 1000, R = 999)

               n1    n2  scale1  scale2  family          equal  unequal
               10    10       1       1  normal         0.0490   0.0480
        """
        lines = [
            f"\nEMPIRICAL TYPE I ERROR (alpha = {self.alpha:g}, "
            f"nreps = {self.nreps}, R = {self.R})",
            "",
            f"{'n1':>5s} {'n2':>5s} {'scale1':>7s} {'scale2':>7s}  "
            f"{'family':<15s} {'equal':>7s} {'unequal':>8s}",
        ]
        for r in self.rows:
            family = f"{r.family}({r.shape:g})" if r.family == 'skew_normal' else r.family
            lines.append(
                f"{r.n1:>5d} {r.n2:>5d} {r.scale1:>7g} {r.scale2:>7g}  "
                f"{family:<15s} {r.equal_rate:>7.4f} {r.unequal_rate:>8.4f}"
            )
        if self.n_failed:
            lines.append("")
            lines.append(f"{self.n_failed} replications failed; see warnings")
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SweepSolution(n_scenarios={len(self.rows)}, "
            f"nreps={self.nreps}, R={self.R}, alpha={self.alpha:g})"
        )
