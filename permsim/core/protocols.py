"""
Core protocols for permsim.

These define structural interfaces that domain-specific implementations must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so that
callers can plug in their own samplers or backends without subclassing.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Randomness is explicit: every random operation receives its Generator
    - Type-safe: use generics to preserve type information through pipelines
"""

from typing import Protocol, TypeVar, Any, runtime_checkable

import numpy as np
from numpy.typing import NDArray

# Type variables for generic payloads
P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class SampleSource(Protocol):
    """
    Producer of i.i.d. draws from a parameterised population.

    Implementations never touch global random state: the caller passes the
    Generator, which keeps concurrent units of work on independent streams.
    """

    @property
    def family(self) -> str:
        """Family name, e.g. 'normal' or 'skew_normal'."""
        ...

    def draw(
        self,
        n: int,
        mean: float,
        scale: float,
        shape: float | None,
        rng: np.random.Generator,
    ) -> NDArray[np.floating[Any]]:
        """
        Draw n independent values.

        Args:
            n: Number of draws (>= 1)
            mean: Population mean
            scale: Population standard deviation (> 0)
            shape: Family-specific shape parameter, or None
            rng: Random generator to draw from

        Returns:
            1D float64 array of length n

        Raises:
            SamplingError: If parameters are invalid or the draw is short
        """
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend knows how to take a domain-specific design and produce
    a domain-specific parameter payload. The backend handles all hardware-
    specific computation (CPU/GPU, precision, batching).

    Backends are stateless: all configuration is passed via the design
    or at construction time. This makes them easy to test and swap.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_permutation', 'gpu_cuda_permutation', 'cpu_simulation'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the statistical computation.

        Args:
            design: Domain-specific design

        Returns:
            Result envelope containing parameter payload and metadata

        Raises:
            NumericDegeneracyError: If a statistic is undefined for the data
            SamplingError: If a sample source fails
            ValidationError: If design is invalid for this backend
        """
        ...
