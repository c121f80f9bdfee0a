"""
Population sampling for the simulation driver.

Usage:
    from permsim.sampling import draw, Family

    rng = np.random.default_rng(1)
    a = draw(10, mean=0.0, scale=1.0, family=Family.SKEW_NORMAL, shape=5.0, rng=rng)
"""

from permsim.sampling._families import (
    DEFAULT_SKEW_SHAPE,
    Family,
    as_family,
    default_shape,
)
from permsim.sampling.sources import (
    NormalSource,
    SkewNormalSource,
    check_draw,
    draw,
    get_source,
)

__all__ = [
    "DEFAULT_SKEW_SHAPE",
    "Family",
    "as_family",
    "default_shape",
    "NormalSource",
    "SkewNormalSource",
    "check_draw",
    "draw",
    "get_source",
]
