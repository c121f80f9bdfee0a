"""
Solver dispatch for the permutation t test.

Provides permutation_t_test() (public API) and backend selection.
"""

from __future__ import annotations

from typing import Literal

import numpy as np
from numpy.typing import ArrayLike

from permsim.core.exceptions import ValidationError
from permsim.core.compute.device import select_device
from permsim.permutation._common import DEFAULT_PERMUTATIONS
from permsim.permutation.design import PermutationDesign
from permsim.permutation.solution import PermutationSolution
from permsim.permutation.backends.cpu import CPUPermutationBackend


BackendChoice = Literal['cpu', 'gpu', 'auto']
BACKEND_CHOICES = ('cpu', 'gpu', 'auto')


def get_backend(backend: str = 'cpu'):
    """
    Select backend for the permutation engine.

    'auto' uses the GPU only when one is present; 'gpu' requires one.

    Raises:
        ValidationError: If backend is not a known choice
        RuntimeError: If 'gpu' is requested and no GPU is available
    """
    if backend not in BACKEND_CHOICES:
        raise ValidationError(
            f"Unknown backend: {backend!r}. Use 'cpu', 'gpu' or 'auto'."
        )
    if backend == 'cpu':
        return CPUPermutationBackend()

    device = select_device(backend)
    if not device.is_gpu:
        return CPUPermutationBackend()

    from permsim.permutation.backends.gpu import GPUPermutationBackend
    return GPUPermutationBackend(device=device.device_type)


def permutation_t_test(
    x: ArrayLike | PermutationDesign,
    y: ArrayLike | None = None,
    *,
    var_equal: bool = False,
    R: int = DEFAULT_PERMUTATIONS,
    seed: int | None = None,
    rng: np.random.Generator | None = None,
    backend: BackendChoice = 'cpu',
) -> PermutationSolution:
    """
    Two-sample permutation t test.

    The observed t statistic is compared with its distribution over R
    random regroupings of the pooled observations into groups of the
    original sizes. The two-sided p-value counts the observed arrangement
    itself:

        p = (#{i : |T_i| >= |T_obs|} + 1) / (R + 1)

    so p is never below 1 / (R + 1).

    Parameters
    ----------
    x : array-like or PermutationDesign
        First sample (1D), or a pre-built design.
    y : array-like
        Second sample (1D). Required unless x is a design.
    var_equal : bool
        True: pooled-variance (Student) t statistic.
        False (default): Welch statistic with unpooled variances.
    R : int
        Number of permutations. Default 999.
    seed : int or None
        Seed for the permutation draws.
    rng : numpy.random.Generator or None
        Generator to draw from instead of seed. It is advanced in place.
    backend : str
        'cpu' (default), 'gpu' or 'auto'.

    Returns
    -------
    PermutationSolution
        observed_stat, perm_stats (length R), p_value, and metadata.

    Raises
    ------
    ValidationError
        If the samples are not finite 1D numeric data, or R < 1.
    NumericDegeneracyError
        If a group has fewer than 2 observations or the statistic's
        denominator is zero for the observed or any permuted grouping.
    """
    if isinstance(x, PermutationDesign):
        design = x
    else:
        if y is None:
            raise ValidationError("y is required for a two-sample test")
        design = PermutationDesign.for_permutation_test(
            x, y, var_equal=var_equal, R=R, seed=seed, rng=rng,
        )

    be = get_backend(backend)
    result = be.solve(design)
    return PermutationSolution(_result=result, _design=design)
