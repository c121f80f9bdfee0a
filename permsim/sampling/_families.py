"""
Population families supported by the sample sources.
"""

from __future__ import annotations

from enum import Enum

from permsim.core.exceptions import ValidationError


class Family(str, Enum):
    """Distribution family tag, chosen once per scenario."""
    NORMAL = "normal"
    SKEW_NORMAL = "skew_normal"

    def __str__(self) -> str:
        return self.value


# Right skew used when a skew-normal scenario does not give a shape.
DEFAULT_SKEW_SHAPE = 5.0


def as_family(family: Family | str) -> Family:
    """
    Coerce a family tag or its string name to Family.

    Raises:
        ValidationError: If the name is not a known family
    """
    if isinstance(family, Family):
        return family
    try:
        return Family(family)
    except ValueError:
        valid = tuple(f.value for f in Family)
        raise ValidationError(
            f"family must be one of {valid}, got {family!r}"
        ) from None


def default_shape(family: Family) -> float:
    """Shape used when a scenario leaves it unset."""
    return DEFAULT_SKEW_SHAPE if family is Family.SKEW_NORMAL else 0.0
