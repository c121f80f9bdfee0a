"""
Design classes for the Type I error simulation.

Scenario describes one row of the sweep table. SimulationDesign and
SweepDesign encapsulate all inputs needed by the simulation backends.
All three are immutable and validated at construction, so a malformed
scenario is rejected before any sampling happens.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Iterable, Sequence

import numpy as np

from permsim.core.exceptions import InvalidScenarioError, ValidationError
from permsim.core.protocols import SampleSource
from permsim.core.compute.streams import (
    SeedLike,
    as_seed_sequence,
    spawn_sequences,
)
from permsim.core.validation import (
    check_choice,
    check_open_unit_interval,
    check_positive_int,
    check_unit_interval,
)
from permsim.permutation._statistics import VARIANCE_ASSUMPTIONS
from permsim.permutation.solvers import BACKEND_CHOICES
from permsim.sampling._families import Family, as_family, default_shape
from permsim.simulation._common import (
    DEFAULT_ALPHA,
    DEFAULT_MAX_FAILURE_RATE,
    DEFAULT_NREPS,
    DEFAULT_R,
    ON_ERROR_CHOICES,
)


def _check_size(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral) or value < 1:
        raise InvalidScenarioError(
            f"{field} must be a positive integer, got {value!r}",
            field=field, value=value,
        )
    return int(value)


def _check_scale(value: Any, field: str) -> float:
    if (
        isinstance(value, bool)
        or not isinstance(value, Real)
        or not math.isfinite(value)
        or value <= 0
    ):
        raise InvalidScenarioError(
            f"{field} must be a finite number > 0, got {value!r}",
            field=field, value=value,
        )
    return float(value)


@dataclass(frozen=True)
class Scenario:
    """
    One simulation scenario: group sizes, population scales and family.

    Both groups are always drawn with mean 0, so every scenario is a null
    case; scale1 != scale2 gives the Behrens-Fisher setting and the
    skew-normal family adds non-normality.

    Attributes:
        n1: Size of the first sample (>= 1).
        n2: Size of the second sample (>= 1).
        scale1: Standard deviation of the first population (> 0).
        scale2: Standard deviation of the second population (> 0).
        family: Family.NORMAL or Family.SKEW_NORMAL (strings accepted).
        shape: Skew-normal shape; defaults to 0 for normal and
            DEFAULT_SKEW_SHAPE for skew-normal.

    Raises:
        InvalidScenarioError: On construction, for any invalid field
    """
    n1: int
    n2: int
    scale1: float
    scale2: float
    family: Family = Family.NORMAL
    shape: float | None = None

    def __post_init__(self):
        object.__setattr__(self, 'n1', _check_size(self.n1, 'n1'))
        object.__setattr__(self, 'n2', _check_size(self.n2, 'n2'))
        object.__setattr__(self, 'scale1', _check_scale(self.scale1, 'scale1'))
        object.__setattr__(self, 'scale2', _check_scale(self.scale2, 'scale2'))

        try:
            family = as_family(self.family)
        except ValidationError as e:
            raise InvalidScenarioError(
                str(e), field='family', value=self.family,
            ) from e
        object.__setattr__(self, 'family', family)

        shape = default_shape(family) if self.shape is None else self.shape
        if (
            isinstance(shape, bool)
            or not isinstance(shape, Real)
            or not math.isfinite(shape)
        ):
            raise InvalidScenarioError(
                f"shape must be a finite number, got {shape!r}",
                field='shape', value=shape,
            )
        object.__setattr__(self, 'shape', float(shape))

    @classmethod
    def coerce(cls, row: Scenario | Sequence[Any]) -> Scenario:
        """
        Build a Scenario from a Scenario or a tuple.

        Accepts (n1, n2, scale1, scale2), (n1, n2, scale1, scale2, family)
        or (n1, n2, scale1, scale2, family, shape).

        Raises:
            InvalidScenarioError: If the row has the wrong arity or values
        """
        if isinstance(row, Scenario):
            return row
        try:
            fields = tuple(row)
        except TypeError:
            raise InvalidScenarioError(
                f"scenario must be a Scenario or a tuple, got {type(row).__name__}",
                field='scenario', value=row,
            ) from None
        if not 4 <= len(fields) <= 6:
            raise InvalidScenarioError(
                f"scenario tuple must have 4 to 6 fields "
                f"(n1, n2, scale1, scale2[, family[, shape]]), got {len(fields)}",
                field='scenario', value=row,
            )
        return cls(*fields)

    def label(self, family: str | None = None) -> str:
        """
        Compact description, e.g. 'n=(10, 40) sd=(1, 4) skew_normal(5)'.

        ``family`` names a sampler that replaces the scenario's own family.
        """
        family = self.family.value if family is None else family
        text = f"n=({self.n1}, {self.n2}) sd=({self.scale1:g}, {self.scale2:g}) {family}"
        if family == Family.SKEW_NORMAL.value:
            text += f"({self.shape:g})"
        return text


def _check_common(
    nreps: Any, R: Any, alpha: Any, on_error: Any,
    max_failure_rate: Any, backend: Any, sampler: Any,
) -> tuple[int, int, float, float]:
    nreps = check_positive_int(nreps, "nreps")
    R = check_positive_int(R, "R")
    alpha = check_open_unit_interval(alpha, "alpha")
    check_choice(on_error, ON_ERROR_CHOICES, "on_error")
    max_failure_rate = check_unit_interval(max_failure_rate, "max_failure_rate")
    check_choice(backend, BACKEND_CHOICES, "backend")
    if sampler is not None and not isinstance(sampler, SampleSource):
        raise ValidationError(
            f"sampler must implement SampleSource (family, draw), "
            f"got {type(sampler).__name__}"
        )
    return nreps, R, alpha, max_failure_rate


@dataclass(frozen=True)
class SimulationDesign:
    """
    Frozen design for one (scenario, variance assumption) simulation.

    Attributes:
        scenario: The scenario to simulate.
        var_equal: Pooled-variance (True) or Welch (False) statistic.
        nreps: Number of replications.
        R: Permutations per test.
        alpha: Rejection threshold; a replication rejects when p < alpha.
        seed_sequence: Root of this run's random streams.
        on_error: 'record' or 'raise' for NumericDegeneracyError.
        max_failure_rate: Largest tolerated share of failed replications.
        sampler: SampleSource overriding the scenario family, or None.
        backend: Permutation backend name.
    """
    scenario: Scenario
    var_equal: bool
    nreps: int
    R: int
    alpha: float
    seed_sequence: np.random.SeedSequence
    on_error: str
    max_failure_rate: float
    sampler: SampleSource | None
    backend: str

    @property
    def variance(self) -> str:
        return VARIANCE_ASSUMPTIONS[0] if self.var_equal else VARIANCE_ASSUMPTIONS[1]

    @property
    def family_name(self) -> str:
        """Family the samples are actually drawn from."""
        if self.sampler is not None:
            family = self.sampler.family
            return family.value if isinstance(family, Family) else str(family)
        return self.scenario.family.value

    def label(self) -> str:
        return self.scenario.label(self.family_name)

    @classmethod
    def for_simulation(
        cls,
        scenario: Scenario | Sequence[Any],
        *,
        var_equal: bool = False,
        nreps: int = DEFAULT_NREPS,
        R: int = DEFAULT_R,
        alpha: float = DEFAULT_ALPHA,
        seed: SeedLike = None,
        on_error: str = "record",
        max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE,
        sampler: SampleSource | None = None,
        backend: str = "cpu",
    ) -> SimulationDesign:
        """
        Create a simulation design with validation.

        Raises:
            InvalidScenarioError: If the scenario is malformed
            ValidationError: If any other input is invalid
        """
        scenario = Scenario.coerce(scenario)
        nreps, R, alpha, max_failure_rate = _check_common(
            nreps, R, alpha, on_error, max_failure_rate, backend, sampler,
        )
        if not isinstance(var_equal, (bool, np.bool_)):
            raise ValidationError(
                f"var_equal must be a bool, got {type(var_equal).__name__}"
            )

        return cls(
            scenario=scenario,
            var_equal=bool(var_equal),
            nreps=nreps,
            R=R,
            alpha=alpha,
            seed_sequence=as_seed_sequence(seed),
            on_error=on_error,
            max_failure_rate=max_failure_rate,
            sampler=sampler,
            backend=backend,
        )


@dataclass(frozen=True)
class SweepDesign:
    """
    Frozen design for a scenario sweep.

    Attributes:
        scenarios: Scenarios in presentation order.
        nreps, R, alpha, on_error, max_failure_rate, sampler, backend:
            Passed to every SimulationDesign.
        seed_sequence: Root of the sweep's random streams; cell (i, v)
            gets child 2 * i + v.
        n_jobs: joblib worker count (1 runs in-process).
    """
    scenarios: tuple[Scenario, ...]
    nreps: int
    R: int
    alpha: float
    seed_sequence: np.random.SeedSequence
    on_error: str
    max_failure_rate: float
    sampler: SampleSource | None
    backend: str
    n_jobs: int

    @classmethod
    def for_sweep(
        cls,
        scenarios: Iterable[Scenario | Sequence[Any]],
        *,
        nreps: int = DEFAULT_NREPS,
        R: int = DEFAULT_R,
        alpha: float = DEFAULT_ALPHA,
        seed: SeedLike = None,
        on_error: str = "record",
        max_failure_rate: float = DEFAULT_MAX_FAILURE_RATE,
        sampler: SampleSource | None = None,
        backend: str = "cpu",
        n_jobs: int = 1,
    ) -> SweepDesign:
        """
        Create a sweep design, validating every scenario up front.

        Raises:
            InvalidScenarioError: If any scenario is malformed
            ValidationError: If the table is empty or another input is invalid
        """
        table = tuple(Scenario.coerce(row) for row in scenarios)
        if not table:
            raise ValidationError("scenarios must contain at least one scenario")

        nreps, R, alpha, max_failure_rate = _check_common(
            nreps, R, alpha, on_error, max_failure_rate, backend, sampler,
        )
        if isinstance(n_jobs, bool) or not isinstance(n_jobs, Integral) or n_jobs == 0:
            raise ValidationError(
                f"n_jobs must be a non-zero integer (-1 for all cores), got {n_jobs!r}"
            )

        return cls(
            scenarios=table,
            nreps=nreps,
            R=R,
            alpha=alpha,
            seed_sequence=as_seed_sequence(seed),
            on_error=on_error,
            max_failure_rate=max_failure_rate,
            sampler=sampler,
            backend=backend,
            n_jobs=int(n_jobs),
        )

    def cells(self) -> list[SimulationDesign]:
        """
        One SimulationDesign per (scenario, variance) pair, scenario-major.

        Each cell's seed is a child of the sweep seed keyed by position,
        so cell results do not depend on n_jobs or execution order.
        """
        children = spawn_sequences(self.seed_sequence, 2 * len(self.scenarios))
        designs = []
        for i, scenario in enumerate(self.scenarios):
            for v, var_equal in enumerate((True, False)):
                designs.append(SimulationDesign(
                    scenario=scenario,
                    var_equal=var_equal,
                    nreps=self.nreps,
                    R=self.R,
                    alpha=self.alpha,
                    seed_sequence=children[2 * i + v],
                    on_error=self.on_error,
                    max_failure_rate=self.max_failure_rate,
                    sampler=self.sampler,
                    backend=self.backend,
                ))
        return designs
