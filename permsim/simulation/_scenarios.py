"""
The standard 24-row scenario table.

Balanced and unbalanced group sizes are crossed with equal and unequal
population standard deviations, once for normal and once for right-skewed
normal populations. The unbalanced rows pair the larger group with both
the smaller and the larger variance, which is where the pooled-variance
test is known to be anti-conservative or conservative.
"""

from __future__ import annotations

from permsim.sampling._families import DEFAULT_SKEW_SHAPE, Family
from permsim.simulation.design import Scenario


STANDARD_SIZES = ((10, 10), (10, 40), (40, 10), (25, 25))
STANDARD_SCALES = ((1.0, 1.0), (1.0, 4.0), (4.0, 1.0))


def standard_scenarios(shape: float = DEFAULT_SKEW_SHAPE) -> tuple[Scenario, ...]:
    """
    Family-major, then sample sizes, then scales.

    Args:
        shape: Skew-normal shape for the skewed half of the table

    Returns:
        24 scenarios
    """
    rows = []
    for family in (Family.NORMAL, Family.SKEW_NORMAL):
        row_shape = shape if family is Family.SKEW_NORMAL else 0.0
        for n1, n2 in STANDARD_SIZES:
            for scale1, scale2 in STANDARD_SCALES:
                rows.append(Scenario(n1, n2, scale1, scale2, family, row_shape))
    return tuple(rows)
