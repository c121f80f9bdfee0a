"""
permsim: Type I error simulation for two-sample permutation t tests.

Estimates how often the permutation t test (pooled-variance or Welch)
rejects a true null hypothesis across sample sizes, variance ratios and
population skew.

Submodules:
    sampling: Normal and skew-normal sample sources
    permutation: t statistics and the permutation engine
    simulation: Replication driver and scenario sweep
"""

__version__ = "0.1.0"

from permsim import sampling
from permsim import permutation
from permsim import simulation
from permsim.permutation import permutation_t_test
from permsim.simulation import (
    Scenario,
    scenario_sweep,
    simulate_type1_error,
    standard_scenarios,
)

__all__ = [
    "__version__",
    "sampling",
    "permutation",
    "simulation",
    "permutation_t_test",
    "Scenario",
    "scenario_sweep",
    "simulate_type1_error",
    "standard_scenarios",
]
