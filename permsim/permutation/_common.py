"""
Common data structures for the permutation engine.

PermutationParams is the parameter payload wrapped by Result[P] and
exposed through PermutationSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


# Permuted observations generated per vectorised block (rows * (n1 + n2)).
PERMUTATION_CHUNK_ELEMENTS = 1 << 20

# |T_i| >= |T_obs| is tested with this relative slack, so permutations
# reproducing the observed split count as "at least as extreme" even when
# summation order changes the last bits.
EXTREMITY_RTOL = 1e-12

# Slack for permuted statistics computed in float32 (MPS).
# float32 eps is about 1.2e-7; sums over a few hundred values lose more.
FLOAT32_EXTREMITY_RTOL = 1e-5

DEFAULT_PERMUTATIONS = 999


@dataclass(frozen=True)
class PermutationParams:
    """
    Parameter payload for permutation t test results.

    - observed_stat: t statistic on the original grouping
    - perm_stats: t statistics from R random regroupings, shape (R,)
    - p_value: (count + 1) / (R + 1), count of |T_i| >= |T_obs|
    """
    observed_stat: float
    perm_stats: NDArray[np.floating[Any]]      # shape (R,)
    p_value: float
    n_extreme: int                              # count without the +1
    R: int
    statistic_name: str                         # "pooled t" | "Welch t"
    var_equal: bool


def two_sided_p_value(
    observed: float,
    perm_stats: NDArray[np.floating[Any]],
    rtol: float = EXTREMITY_RTOL,
) -> tuple[float, int]:
    """
    Two-sided permutation p-value with the +1 correction.

    rtol is the relative slack in |T_i| >= |T_obs|; it must cover the
    rounding error of the precision the statistics were computed in.

    Returns:
        (p_value, count) where count excludes the observed arrangement
    """
    threshold = abs(observed) * (1.0 - rtol)
    count = int(np.sum(np.abs(perm_stats) >= threshold))
    return float(count + 1) / float(len(perm_stats) + 1), count
