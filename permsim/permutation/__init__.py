"""
Two-sample permutation t test.

Provides the pooled-variance and Welch t statistics and the permutation
engine that turns either into a two-sided p-value, with CPU and GPU
backends.

Usage:
    from permsim.permutation import permutation_t_test

    result = permutation_t_test(x, y, var_equal=False, R=999, seed=42)
    result.p_value
"""

from permsim.permutation.solvers import permutation_t_test
from permsim.permutation._statistics import (
    VARIANCE_ASSUMPTIONS,
    get_statistic,
    pooled_t,
    welch_t,
)
from permsim.permutation._common import PermutationParams
from permsim.permutation.design import PermutationDesign
from permsim.permutation.solution import PermutationSolution

__all__ = [
    "permutation_t_test",
    "pooled_t",
    "welch_t",
    "get_statistic",
    "VARIANCE_ASSUMPTIONS",
    "PermutationParams",
    "PermutationDesign",
    "PermutationSolution",
]
