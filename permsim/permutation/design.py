"""
Design class for the permutation t test.

PermutationDesign encapsulates all inputs needed by backends to perform
resampling. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from permsim.core.exceptions import ValidationError
from permsim.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_min_samples,
    check_positive_int,
)
from permsim.permutation._common import DEFAULT_PERMUTATIONS
from permsim.permutation._statistics import get_statistic, variance_label


@dataclass(frozen=True)
class PermutationDesign:
    """
    Frozen design for a two-sample permutation t test.

    Attributes:
        x: Group 1 data, shape (n1,).
        y: Group 2 data, shape (n2,).
        var_equal: True for the pooled-variance statistic, False for Welch.
        R: Number of permutations.
        seed: Random seed for reproducibility (ignored when rng is given).
        rng: Explicit Generator to draw permutations from. The backend
            advances it; callers running concurrent tests must give each
            its own.
    """
    x: NDArray[np.floating[Any]]
    y: NDArray[np.floating[Any]]
    var_equal: bool
    R: int
    seed: int | None
    rng: np.random.Generator | None = None

    @property
    def n1(self) -> int:
        return self.x.shape[0]

    @property
    def n2(self) -> int:
        return self.y.shape[0]

    @property
    def variance(self) -> str:
        """'equal' or 'unequal'."""
        return variance_label(self.var_equal)

    @property
    def statistic_name(self) -> str:
        return get_statistic(self.variance)[0]

    @property
    def statistic(self):
        return get_statistic(self.variance)[1]

    @classmethod
    def for_permutation_test(
        cls,
        x: ArrayLike,
        y: ArrayLike,
        *,
        var_equal: bool = False,
        R: int = DEFAULT_PERMUTATIONS,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> PermutationDesign:
        """
        Create a permutation test design with validation.

        Group sizes below 2 are accepted here; the statistic reports them
        as NumericDegeneracyError when the test runs.

        Args:
            x: Group 1 data.
            y: Group 2 data.
            var_equal: Pooled-variance (True) or Welch (False) statistic.
            R: Number of permutations. Must be >= 1.
            seed: Random seed.
            rng: Generator to use instead of seed.

        Returns:
            Validated PermutationDesign.

        Raises:
            ValidationError: If inputs are invalid
            DimensionError: If x or y is not 1D
        """
        x_arr = check_array(x, "x")
        y_arr = check_array(y, "y")
        check_1d(x_arr, "x")
        check_1d(y_arr, "y")
        check_min_samples(x_arr, 1, "x")
        check_min_samples(y_arr, 1, "y")
        check_finite(x_arr, "x")
        check_finite(y_arr, "y")

        R = check_positive_int(R, "R")

        if not isinstance(var_equal, (bool, np.bool_)):
            raise ValidationError(
                f"var_equal must be a bool, got {type(var_equal).__name__}"
            )

        if rng is not None and not isinstance(rng, np.random.Generator):
            raise ValidationError(
                f"rng must be a numpy Generator, got {type(rng).__name__}"
            )

        return cls(
            x=x_arr,
            y=y_arr,
            var_equal=bool(var_equal),
            R=R,
            seed=seed,
            rng=rng,
        )
