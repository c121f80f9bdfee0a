"""
CPU backend for the permutation t test.

CPUPermutationBackend: vectorised permutation distribution with the
(count + 1) / (R + 1) p-value.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from permsim.core.result import Result
from permsim.core.compute.streams import make_generator
from permsim.core.compute.timing import Timer
from permsim.permutation._common import (
    PERMUTATION_CHUNK_ELEMENTS,
    PermutationParams,
    two_sided_p_value,
)
from permsim.permutation.design import PermutationDesign


def canonical_order(
    x: NDArray, y: NDArray,
) -> tuple[NDArray, NDArray, float]:
    """
    Order the two groups by content and return the sign to undo it.

    Group order is fixed by (size, values) so that swapping the arguments
    draws the same partitions and only flips the sign of every statistic.
    """
    if (x.shape[0], x.tolist()) <= (y.shape[0], y.tolist()):
        return x, y, 1.0
    return y, x, -1.0


def permutation_chunks(R: int, n: int) -> list[int]:
    """Row counts of the blocks the R permutations are generated in."""
    rows = max(1, PERMUTATION_CHUNK_ELEMENTS // n)
    return [min(rows, R - start) for start in range(0, R, rows)]


class CPUPermutationBackend:
    """
    CPU backend for permutation testing.

    Each block tiles the pooled observations, shuffles every row
    independently (a uniform permutation per row, i.e. sampling without
    replacement from the pooled index set) and evaluates the statistic on
    the whole block at once.
    """

    @property
    def name(self) -> str:
        return 'cpu_permutation'

    def solve(self, design: PermutationDesign) -> Result[PermutationParams]:
        """
        Run permutation test and return Result[PermutationParams].

        Raises:
            NumericDegeneracyError: If the observed or any permuted
                statistic is undefined; no partial result is returned.
        """
        timer = Timer()
        timer.start()

        statistic = design.statistic
        R = design.R
        rng = design.rng if design.rng is not None else make_generator(design.seed)

        a, b, sign = canonical_order(design.x, design.y)
        n_a = a.shape[0]

        with timer.section('observed_stat'):
            observed = sign * statistic(a, b)

        with timer.section('permutation_replicates'):
            combined = np.concatenate([a, b])
            perm_stats = np.empty(R, dtype=np.float64)

            start = 0
            for rows in permutation_chunks(R, combined.shape[0]):
                block = rng.permuted(np.tile(combined, (rows, 1)), axis=1)
                perm_stats[start:start + rows] = sign * statistic(
                    block[:, :n_a], block[:, n_a:]
                )
                start += rows

        with timer.section('p_value'):
            p_value, count = two_sided_p_value(observed, perm_stats)

        timer.stop()

        params = PermutationParams(
            observed_stat=float(observed),
            perm_stats=perm_stats,
            p_value=p_value,
            n_extreme=count,
            R=R,
            statistic_name=design.statistic_name,
            var_equal=design.var_equal,
        )

        return Result(
            params=params,
            info={
                'n1': design.n1,
                'n2': design.n2,
                'variance': design.variance,
                'seed': design.seed,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
