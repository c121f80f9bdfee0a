"""
Exception hierarchy for permsim.

All exceptions inherit from PermsimError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
    - Never coerce a failed computation into a default p-value
"""


class PermsimError(Exception):
    """Base exception for all permsim errors."""
    pass


class ValidationError(PermsimError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when a sample is not one-dimensional or when a batch of
    permuted groups has an unexpected shape.
    """
    pass


class InvalidScenarioError(ValidationError):
    """
    A simulation scenario is malformed.

    Raised at design construction, before any sampling happens, when a
    scenario has a non-positive sample size or scale, an unknown family,
    or a non-finite shape.

    Attributes:
        field: Name of the offending scenario field
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: object = None,
    ):
        super().__init__(message)
        self.field = field
        self.value = value


class NumericalError(PermsimError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class NumericDegeneracyError(NumericalError):
    """
    A test statistic is undefined for the given data.

    Raised when a sample has fewer than two observations or the
    statistic's standard-error denominator is zero (e.g. both groups
    constant). A NaN or infinite statistic would silently corrupt the
    rank comparison behind the permutation p-value, so the computation
    stops instead.

    Attributes:
        statistic: Name of the statistic ('pooled t' or 'Welch t')
        n1: Size of the first group
        n2: Size of the second group
        reason: Short machine-readable cause ('too_few_observations',
            'zero_denominator', 'non_finite')
    """

    def __init__(
        self,
        message: str,
        statistic: str | None = None,
        n1: int | None = None,
        n2: int | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.statistic = statistic
        self.n1 = n1
        self.n2 = n2
        self.reason = reason


class SamplingError(PermsimError):
    """
    A sample source could not produce the requested draws.

    Raised for invalid distribution parameters or when a source returns
    fewer values than requested (or non-finite values).

    Attributes:
        family: Distribution family name
        n: Requested sample size
        reason: What went wrong
    """

    def __init__(
        self,
        message: str,
        family: str | None = None,
        n: int | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.family = family
        self.n = n
        self.reason = reason
