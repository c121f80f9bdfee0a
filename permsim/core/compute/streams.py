"""
Independent random streams for concurrent units of work.

Every unit (sweep cell, replication, permutation batch) owns its own
numpy Generator derived from a root SeedSequence with spawn(). Spawned
children are statistically independent and non-overlapping, and the
tree is keyed by position, so results do not depend on execution order
or on how work is split across processes.
"""

from __future__ import annotations

from numbers import Integral
from typing import Iterator

import numpy as np

from permsim.core.exceptions import ValidationError


SeedLike = int | np.random.SeedSequence | None


def as_seed_sequence(seed: SeedLike) -> np.random.SeedSequence:
    """
    Normalise a user seed into a SeedSequence.

    Args:
        seed: None (fresh OS entropy), a non-negative int, or a SeedSequence

    Raises:
        ValidationError: If seed is negative or of an unsupported type
    """
    if isinstance(seed, np.random.SeedSequence):
        return seed
    if seed is None:
        return np.random.SeedSequence()
    if isinstance(seed, bool) or not isinstance(seed, Integral):
        raise ValidationError(
            f"seed must be None, a non-negative int or a SeedSequence, "
            f"got {type(seed).__name__}"
        )
    if seed < 0:
        raise ValidationError(f"seed must be non-negative, got {seed}")
    return np.random.SeedSequence(int(seed))


def make_generator(seed: SeedLike) -> np.random.Generator:
    """Generator backed by PCG64 for a seed-like value."""
    return np.random.Generator(np.random.PCG64(as_seed_sequence(seed)))


def spawn_sequences(
    seed: SeedLike, n: int,
) -> list[np.random.SeedSequence]:
    """
    The first n children of a seed-like value.

    Unlike SeedSequence.spawn() this does not advance the parent's child
    counter, so calling it twice on the same sequence yields the same
    children and a design can be solved repeatedly with identical results.
    """
    parent = as_seed_sequence(seed)
    return [
        np.random.SeedSequence(
            entropy=parent.entropy,
            spawn_key=parent.spawn_key + (k,),
            pool_size=parent.pool_size,
        )
        for k in range(n)
    ]


def replication_streams(
    seed: SeedLike, nreps: int,
) -> Iterator[tuple[np.random.Generator, np.random.Generator]]:
    """
    Yield (sampling_rng, permutation_rng) pairs, one per replication.

    Population sampling and permutation resampling get separate streams so
    that changing R never changes the samples a replication draws.
    """
    for child in spawn_sequences(seed, nreps):
        ss_sample, ss_perm = child.spawn(2)
        yield (
            np.random.Generator(np.random.PCG64(ss_sample)),
            np.random.Generator(np.random.PCG64(ss_perm)),
        )
