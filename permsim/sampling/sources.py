"""
Sample sources for normal and right-skewed normal populations.

Both sources take mean and scale as the population mean and standard
deviation, so scenarios with equal means are null cases regardless of
family, shape or scale.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from permsim.core.exceptions import SamplingError, ValidationError
from permsim.sampling._families import Family, as_family, default_shape


def _check_params(family: str, n: Any, mean: Any, scale: Any) -> None:
    """Raise SamplingError for parameters no population can satisfy."""
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1:
        raise SamplingError(
            f"{family}: n must be a positive integer, got {n!r}",
            family=family, n=None, reason="invalid_n",
        )
    if not math.isfinite(mean):
        raise SamplingError(
            f"{family}: mean must be finite, got {mean}",
            family=family, n=int(n), reason="invalid_mean",
        )
    if not (math.isfinite(scale) and scale > 0):
        raise SamplingError(
            f"{family}: scale must be finite and > 0, got {scale}",
            family=family, n=int(n), reason="invalid_scale",
        )


def check_draw(family: str, n: int, values: NDArray) -> NDArray[np.floating[Any]]:
    """Verify a source returned exactly n finite values."""
    values = np.asarray(values, dtype=np.float64).ravel()
    if values.shape[0] != n:
        raise SamplingError(
            f"{family}: requested {n} draws, got {values.shape[0]}",
            family=family, n=n, reason="short_draw",
        )
    if not np.all(np.isfinite(values)):
        raise SamplingError(
            f"{family}: draw contains non-finite values",
            family=family, n=n, reason="non_finite",
        )
    return values


class NormalSource:
    """Gaussian population N(mean, scale^2)."""

    @property
    def family(self) -> str:
        return Family.NORMAL.value

    def draw(
        self,
        n: int,
        mean: float,
        scale: float,
        shape: float | None,
        rng: np.random.Generator,
    ) -> NDArray[np.floating[Any]]:
        """Draw n values; shape is ignored."""
        _check_params(self.family, n, mean, scale)
        return check_draw(self.family, n, rng.normal(mean, scale, size=n))

    def __repr__(self) -> str:
        return "NormalSource()"


@lru_cache(maxsize=64)
def _skewnorm_moments(shape: float) -> tuple[float, float]:
    """Mean and standard deviation of the standard skew-normal with shape a."""
    mean, var = sp_stats.skewnorm.stats(shape, moments="mv")
    return float(mean), float(np.sqrt(var))


class SkewNormalSource:
    """
    Azzalini skew-normal population, standardised to the requested moments.

    Variates z ~ SN(0, 1, a) are mapped to mean + scale * (z - mu_a) / sd_a,
    where mu_a and sd_a are the mean and standard deviation of SN(0, 1, a).
    shape=0 is the normal distribution; larger positive shape gives a longer
    right tail. The mean and standard deviation stay as requested.
    """

    @property
    def family(self) -> str:
        return Family.SKEW_NORMAL.value

    def draw(
        self,
        n: int,
        mean: float,
        scale: float,
        shape: float | None,
        rng: np.random.Generator,
    ) -> NDArray[np.floating[Any]]:
        """Draw n values; shape=None uses the default right skew."""
        _check_params(self.family, n, mean, scale)
        a = default_shape(Family.SKEW_NORMAL) if shape is None else float(shape)
        if not math.isfinite(a):
            raise SamplingError(
                f"{self.family}: shape must be finite, got {shape}",
                family=self.family, n=int(n), reason="invalid_shape",
            )

        z = sp_stats.skewnorm.rvs(a, size=n, random_state=rng)
        mu_a, sd_a = _skewnorm_moments(a)
        return check_draw(self.family, n, mean + scale * (z - mu_a) / sd_a)

    def __repr__(self) -> str:
        return "SkewNormalSource()"


_SOURCES = {
    Family.NORMAL: NormalSource(),
    Family.SKEW_NORMAL: SkewNormalSource(),
}


def get_source(family: Family | str):
    """
    Source instance for a family tag.

    Raises:
        SamplingError: If family is unknown
    """
    try:
        return _SOURCES[as_family(family)]
    except ValidationError as e:
        raise SamplingError(str(e), family=str(family), reason="unknown_family") from e


def draw(
    n: int,
    mean: float,
    scale: float,
    shape: float | None = None,
    family: Family | str = Family.NORMAL,
    *,
    rng: np.random.Generator,
) -> NDArray[np.floating[Any]]:
    """
    Draw n i.i.d. values from a named population.

    Args:
        n: Number of draws (>= 1)
        mean: Population mean
        scale: Population standard deviation (> 0)
        shape: Skew-normal shape (ignored for 'normal'); None uses the default
        family: 'normal' or 'skew_normal'
        rng: Generator to draw from

    Returns:
        1D float64 array of length n

    Raises:
        SamplingError: If the parameters are invalid or the draw fails
    """
    return get_source(family).draw(n, mean, scale, shape, rng)
