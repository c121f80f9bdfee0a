"""
Core infrastructure for permsim.

This module provides shared abstractions, utilities, and backend infrastructure
used by the domain-specific submodules (sampling, permutation, simulation).

Key components:
    protocols: SampleSource, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Hardware detection, timing, random streams
"""

from permsim.core.protocols import SampleSource, Backend
from permsim.core.result import Result
from permsim.core.exceptions import (
    PermsimError,
    ValidationError,
    DimensionError,
    InvalidScenarioError,
    NumericalError,
    NumericDegeneracyError,
    SamplingError,
)

__all__ = [
    # Protocols
    "SampleSource",
    "Backend",
    # Result
    "Result",
    # Exceptions
    "PermsimError",
    "ValidationError",
    "DimensionError",
    "InvalidScenarioError",
    "NumericalError",
    "NumericDegeneracyError",
    "SamplingError",
]
