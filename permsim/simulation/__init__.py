"""
Monte Carlo estimation of the permutation t test's Type I error rate.

Usage:
    from permsim.simulation import Scenario, simulate_type1_error, scenario_sweep

    # One scenario
    result = simulate_type1_error(Scenario(10, 10, 1.0, 1.0), nreps=2000, seed=1)
    result.rejection_rate

    # The standard 24-row table, both variance assumptions
    sweep = scenario_sweep(nreps=1000, R=999, seed=1, n_jobs=-1)
    print(sweep.summary())
"""

from permsim.simulation.solvers import simulate_type1_error, scenario_sweep
from permsim.simulation._scenarios import standard_scenarios
from permsim.simulation._common import (
    DEFAULT_ALPHA,
    DEFAULT_NREPS,
    DEFAULT_R,
    RejectionParams,
    ScenarioResult,
    SweepParams,
    SweepRow,
)
from permsim.simulation.design import Scenario, SimulationDesign, SweepDesign
from permsim.simulation.solution import SimulationSolution, SweepSolution

__all__ = [
    "simulate_type1_error",
    "scenario_sweep",
    "standard_scenarios",
    "DEFAULT_ALPHA",
    "DEFAULT_NREPS",
    "DEFAULT_R",
    "RejectionParams",
    "ScenarioResult",
    "SweepParams",
    "SweepRow",
    "Scenario",
    "SimulationDesign",
    "SweepDesign",
    "SimulationSolution",
    "SweepSolution",
]
