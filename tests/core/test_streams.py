"""
Tests for random stream management.

Validates:
    - Seed normalisation (None, int, SeedSequence, rejects the rest)
    - spawn_sequences is positional and does not mutate the parent
    - replication_streams gives separate sampling and permutation streams
"""

import numpy as np
import pytest

from permsim.core.exceptions import ValidationError
from permsim.core.compute.streams import (
    as_seed_sequence,
    make_generator,
    replication_streams,
    spawn_sequences,
)


class TestAsSeedSequence:

    def test_int_seed(self):
        ss = as_seed_sequence(7)
        assert ss.entropy == 7

    def test_seed_sequence_passthrough(self):
        ss = np.random.SeedSequence(3)
        assert as_seed_sequence(ss) is ss

    def test_none_draws_fresh_entropy(self):
        assert as_seed_sequence(None).entropy != as_seed_sequence(None).entropy

    def test_numpy_int_accepted(self):
        assert as_seed_sequence(np.int64(11)).entropy == 11

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="non-negative"):
            as_seed_sequence(-1)

    @pytest.mark.parametrize("seed", [1.5, "42", True])
    def test_bad_type_rejected(self, seed):
        with pytest.raises(ValidationError, match="seed must be"):
            as_seed_sequence(seed)


class TestMakeGenerator:

    def test_same_seed_same_draws(self):
        a = make_generator(5).random(4)
        b = make_generator(5).random(4)
        np.testing.assert_array_equal(a, b)

    def test_pcg64(self):
        assert isinstance(make_generator(5).bit_generator, np.random.PCG64)


class TestSpawnSequences:

    def test_count(self):
        assert len(spawn_sequences(1, 6)) == 6

    def test_parent_not_mutated(self):
        parent = np.random.SeedSequence(9)
        spawn_sequences(parent, 4)
        assert parent.n_children_spawned == 0

    def test_repeatable(self):
        parent = np.random.SeedSequence(9)
        first = [c.generate_state(2).tolist() for c in spawn_sequences(parent, 3)]
        second = [c.generate_state(2).tolist() for c in spawn_sequences(parent, 3)]
        assert first == second

    def test_matches_numpy_spawn(self):
        ours = spawn_sequences(9, 3)
        theirs = np.random.SeedSequence(9).spawn(3)
        for a, b in zip(ours, theirs):
            np.testing.assert_array_equal(a.generate_state(4), b.generate_state(4))

    def test_prefix_stable(self):
        short = spawn_sequences(2, 2)
        long = spawn_sequences(2, 5)
        for a, b in zip(short, long):
            assert a.spawn_key == b.spawn_key

    def test_children_distinct(self):
        states = {tuple(c.generate_state(2)) for c in spawn_sequences(4, 10)}
        assert len(states) == 10


class TestReplicationStreams:

    def test_yields_nreps_pairs(self):
        pairs = list(replication_streams(1, 5))
        assert len(pairs) == 5
        for sample_rng, perm_rng in pairs:
            assert isinstance(sample_rng, np.random.Generator)
            assert isinstance(perm_rng, np.random.Generator)

    def test_sampling_and_permutation_streams_differ(self):
        sample_rng, perm_rng = next(iter(replication_streams(1, 1)))
        assert sample_rng.random() != perm_rng.random()

    def test_sampling_stream_independent_of_nreps(self):
        a = [s.random() for s, _ in replication_streams(3, 2)]
        b = [s.random() for s, _ in replication_streams(3, 4)][:2]
        assert a == b
