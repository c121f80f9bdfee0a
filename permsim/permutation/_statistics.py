"""
Two-sample t statistics for the permutation engine.

Both statistics accept either a pair of 1D samples or a pair of 2D
batches whose rows are permuted groups (shape (R, n1) and (R, n2)), and
reduce over the last axis. A 1D call returns a float; a batched call
returns an array of shape (R,).

Neither statistic ever returns NaN or infinity: undefined values raise
NumericDegeneracyError, because the permutation p-value is a rank
comparison and unordered values would corrupt it.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from permsim.core.exceptions import NumericDegeneracyError, ValidationError


VARIANCE_ASSUMPTIONS = ("equal", "unequal")

POOLED_NAME = "pooled t"
WELCH_NAME = "Welch t"


def _group_moments(x: NDArray, y: NDArray, name: str):
    n1, n2 = x.shape[-1], y.shape[-1]
    if n1 < 2 or n2 < 2:
        raise NumericDegeneracyError(
            f"{name}: each group needs at least 2 observations, "
            f"got n1={n1}, n2={n2}",
            statistic=name, n1=n1, n2=n2, reason="too_few_observations",
        )
    # Moments are taken about each group's first value. Differences of
    # nearby floats are exact, so a constant group has variance exactly 0
    # and a small spread at a large offset is kept.
    origin = x[..., :1]
    diff = np.mean(x - origin, axis=-1) - np.mean(y - origin, axis=-1)
    var1 = np.var(x - x[..., :1], axis=-1, ddof=1)
    var2 = np.var(y - y[..., :1], axis=-1, ddof=1)
    return n1, n2, diff, var1, var2


def _finish(
    diff: NDArray, se: NDArray, name: str, n1: int, n2: int,
) -> float | NDArray[np.floating[Any]]:
    degenerate = ~(se > 0.0)
    if np.any(degenerate):
        n_bad = int(np.sum(degenerate))
        raise NumericDegeneracyError(
            f"{name}: standard error is zero in {n_bad} of "
            f"{degenerate.size} group pair(s) (constant groups)",
            statistic=name, n1=n1, n2=n2, reason="zero_denominator",
        )

    t = diff / se
    if not np.all(np.isfinite(t)):
        raise NumericDegeneracyError(
            f"{name}: statistic is not finite",
            statistic=name, n1=n1, n2=n2, reason="non_finite",
        )
    if np.ndim(t) == 0:
        return float(t)
    return t


def pooled_t(x: NDArray, y: NDArray) -> float | NDArray[np.floating[Any]]:
    """
    Student's two-sample t statistic with pooled variance.

    t = (mean(x) - mean(y)) / sqrt(sp2 * (1/n1 + 1/n2)),
    sp2 = ((n1 - 1) var(x) + (n2 - 1) var(y)) / (n1 + n2 - 2).

    Raises:
        NumericDegeneracyError: If a group has < 2 observations or both
            groups are constant
    """
    n1, n2, diff, var1, var2 = _group_moments(x, y, POOLED_NAME)
    sp2 = ((n1 - 1) * var1 + (n2 - 1) * var2) / (n1 + n2 - 2)
    se = np.sqrt(sp2 * (1.0 / n1 + 1.0 / n2))
    return _finish(diff, se, POOLED_NAME, n1, n2)


def welch_t(x: NDArray, y: NDArray) -> float | NDArray[np.floating[Any]]:
    """
    Welch's unequal-variance t statistic.

    t = (mean(x) - mean(y)) / sqrt(var(x)/n1 + var(y)/n2).

    Raises:
        NumericDegeneracyError: If a group has < 2 observations or both
            groups are constant
    """
    n1, n2, diff, var1, var2 = _group_moments(x, y, WELCH_NAME)
    se = np.sqrt(var1 / n1 + var2 / n2)
    return _finish(diff, se, WELCH_NAME, n1, n2)


_STATISTICS: dict[str, tuple[str, Callable]] = {
    "equal": (POOLED_NAME, pooled_t),
    "unequal": (WELCH_NAME, welch_t),
}


def variance_label(var_equal: bool) -> str:
    """'equal' or 'unequal' for a var_equal flag."""
    return "equal" if var_equal else "unequal"


def get_statistic(variance: str) -> tuple[str, Callable]:
    """
    (name, function) for a variance assumption.

    Raises:
        ValidationError: If variance is not 'equal' or 'unequal'
    """
    try:
        return _STATISTICS[variance]
    except KeyError:
        raise ValidationError(
            f"variance must be one of {VARIANCE_ASSUMPTIONS}, got {variance!r}"
        ) from None
