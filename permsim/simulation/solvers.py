"""
Solver dispatch for the Type I error simulation.

Provides simulate_type1_error() for one scenario and scenario_sweep()
for a whole table.
"""

from __future__ import annotations

import warnings
from typing import Any, Iterable, Sequence

from permsim.core.protocols import SampleSource
from permsim.core.compute.streams import SeedLike
from permsim.simulation._common import (
    DEFAULT_ALPHA,
    DEFAULT_MAX_FAILURE_RATE,
    DEFAULT_NREPS,
    DEFAULT_R,
)
from permsim.simulation._scenarios import standard_scenarios
from permsim.simulation.backends.cpu import CPUSimulationBackend, CPUSweepBackend
from permsim.simulation.design import Scenario, SimulationDesign, SweepDesign
from permsim.simulation.solution import SimulationSolution, SweepSolution


def _warn_failures(messages: tuple[str, ...]) -> None:
    for message in messages:
        warnings.warn(message, RuntimeWarning, stacklevel=3)


def simulate_type1_error(
    scenario: Scenario | Sequence[Any] | SimulationDesign,
    *,
    var_equal: bool = False,
    nreps: int = DEFAULT_NREPS,
    R: int = DEFAULT_R,
    alpha: float = DEFAULT_ALPHA,
    seed: SeedLike = None,
    on_error: str = "record",
    max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE,
    sampler: SampleSource | None = None,
    backend: str = 'cpu',
) -> SimulationSolution:
    """
    Empirical Type I error rate of the permutation t test for one scenario.

    Each of nreps replications draws sample A (n1, mean 0, scale1) and
    sample B (n2, mean 0, scale2) from the scenario's family, runs the
    permutation t test and records whether p < alpha. Both means are 0, so
    every rejection is a false positive.

    Parameters
    ----------
    scenario : Scenario, tuple or SimulationDesign
        Scenario, or (n1, n2, scale1, scale2[, family[, shape]]).
    var_equal : bool
        Pooled-variance (True) or Welch (False, default) statistic.
    nreps : int
        Replications. Default 1000.
    R : int
        Permutations per test. Default 999.
    alpha : float
        Significance level in (0, 1). Default 0.05.
    seed : int, SeedSequence or None
        Root seed. Replications use independent spawned streams.
    on_error : str
        'record' (default): a replication whose statistic is degenerate is
        aborted, counted in n_failed and excluded from the rate.
        'raise': the first NumericDegeneracyError propagates.
    max_failure_rate : float
        With 'record', raise NumericDegeneracyError if more than this share
        of replications fail. Default 0.5.
    sampler : SampleSource or None
        Overrides the source chosen by the scenario's family.
    backend : str
        Permutation backend: 'cpu' (default), 'gpu' or 'auto'.

    Returns
    -------
    SimulationSolution

    Raises
    ------
    InvalidScenarioError
        If the scenario is malformed (before any sampling).
    SamplingError
        Propagated unchanged from the sample source.
    NumericDegeneracyError
        Per the on_error policy above.
    """
    if isinstance(scenario, SimulationDesign):
        design = scenario
    else:
        design = SimulationDesign.for_simulation(
            scenario,
            var_equal=var_equal,
            nreps=nreps,
            R=R,
            alpha=alpha,
            seed=seed,
            on_error=on_error,
            max_failure_rate=max_failure_rate,
            sampler=sampler,
            backend=backend,
        )

    result = CPUSimulationBackend().solve(design)
    _warn_failures(result.warnings)
    return SimulationSolution(_result=result, _design=design)


def scenario_sweep(
    scenarios: Iterable[Scenario | Sequence[Any]] | SweepDesign | None = None,
    *,
    nreps: int = DEFAULT_NREPS,
    R: int = DEFAULT_R,
    alpha: float = DEFAULT_ALPHA,
    seed: SeedLike = None,
    on_error: str = "record",
    max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE,
    sampler: SampleSource | None = None,
    backend: str = 'cpu',
    n_jobs: int = 1,
) -> SweepSolution:
    """
    Run simulate_type1_error for every scenario under both variance assumptions.

    Parameters
    ----------
    scenarios : iterable, SweepDesign or None
        Scenarios or tuples in presentation order; None uses
        standard_scenarios(). All rows are validated before any sampling.
    nreps, R, alpha, on_error, max_failure_rate, sampler, backend
        As for simulate_type1_error, applied to every cell.
    seed : int, SeedSequence or None
        Root seed. Cell (scenario i, variance v) uses child 2 * i + v.
    n_jobs : int
        joblib worker processes; 1 (default) runs in-process, -1 uses all
        cores. Results do not depend on n_jobs.

    Returns
    -------
    SweepSolution
        One row per scenario with equal- and unequal-variance rates.

    Raises
    ------
    InvalidScenarioError
        If any scenario is malformed.
    SamplingError, NumericDegeneracyError
        Propagated from the failing cell.
    """
    if isinstance(scenarios, SweepDesign):
        design = scenarios
    else:
        design = SweepDesign.for_sweep(
            standard_scenarios() if scenarios is None else scenarios,
            nreps=nreps,
            R=R,
            alpha=alpha,
            seed=seed,
            on_error=on_error,
            max_failure_rate=max_failure_rate,
            sampler=sampler,
            backend=backend,
            n_jobs=n_jobs,
        )

    result = CPUSweepBackend().solve(design)
    _warn_failures(result.warnings)
    return SweepSolution(_result=result, _design=design)
