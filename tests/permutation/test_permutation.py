"""
Tests for the permutation t test.

Validates:
    - p-value bounds and the +1 correction
    - Permutation distribution shape and reproducibility
    - Swapping the groups flips the sign but keeps the p-value
    - Degenerate data raises NumericDegeneracyError, never a p-value
    - Design validation and backend selection
"""

import numpy as np
import pytest

from permsim.core.exceptions import (
    DimensionError,
    NumericDegeneracyError,
    ValidationError,
)
from permsim.permutation import (
    PermutationDesign,
    PermutationSolution,
    permutation_t_test,
)
from permsim.permutation._common import FLOAT32_EXTREMITY_RTOL, two_sided_p_value
from permsim.permutation.backends.cpu import canonical_order, permutation_chunks
from permsim.permutation.solvers import get_backend


# ═══════════════════════════════════════════════════════════════════════
# p-value
# ═══════════════════════════════════════════════════════════════════════


class TestTwoSidedPValue:

    def test_counts_absolute_values(self):
        p, count = two_sided_p_value(2.0, np.array([-3.0, 1.0, 2.5, -1.9]))
        assert count == 2
        assert p == pytest.approx(3 / 5)

    def test_ties_count_as_extreme(self):
        p, count = two_sided_p_value(-1.5, np.array([1.5, 1.5 * (1 + 1e-15), 0.2]))
        assert count == 2
        assert p == pytest.approx(3 / 4)

    def test_float32_ties_need_wider_slack(self):
        # float32 spacing near 2.35 is about 2.4e-7, so this rounds down
        observed = float(np.float32(2.345678)) + 1e-7
        perm_stats = np.array([float(np.float32(observed)), 0.1])
        assert perm_stats[0] < observed
        _, strict = two_sided_p_value(observed, perm_stats)
        _, count = two_sided_p_value(observed, perm_stats, rtol=FLOAT32_EXTREMITY_RTOL)
        assert strict == 0
        assert count == 1

    def test_minimum(self):
        p, count = two_sided_p_value(10.0, np.zeros(99))
        assert count == 0
        assert p == pytest.approx(0.01)

    def test_zero_observed_gives_one(self):
        p, _ = two_sided_p_value(0.0, np.array([0.5, -0.1]))
        assert p == 1.0


class TestPermutationTest:

    def test_basic(self, normal_pair):
        x, y = normal_pair
        result = permutation_t_test(x, y, R=199, seed=1)
        assert isinstance(result, PermutationSolution)
        assert result.perm_stats.shape == (199,)
        assert 1 / 200 <= result.p_value <= 1.0
        assert result.p_value == pytest.approx((result.n_extreme + 1) / 200)
        assert result.n1 == 12
        assert result.n2 == 15

    def test_separated_groups_significant(self, separated_pair):
        result = permutation_t_test(*separated_pair, R=999, seed=2)
        assert result.observed_stat == pytest.approx(-5.0)
        assert result.p_value < 0.05
        assert result.p_value >= 1 / 1000

    @pytest.mark.parametrize("var_equal,name", [(True, "pooled t"), (False, "Welch t")])
    def test_statistic_choice(self, normal_pair, var_equal, name):
        result = permutation_t_test(*normal_pair, var_equal=var_equal, R=9, seed=0)
        assert result.statistic_name == name
        assert result.var_equal is var_equal
        assert result.info['variance'] == ("equal" if var_equal else "unequal")

    def test_single_permutation(self, normal_pair):
        result = permutation_t_test(*normal_pair, R=1, seed=0)
        assert result.perm_stats.shape == (1,)
        assert result.p_value in (0.5, 1.0)

    def test_permuted_stats_finite(self, normal_pair):
        result = permutation_t_test(*normal_pair, R=500, seed=4)
        assert np.all(np.isfinite(result.perm_stats))

    def test_timing_sections(self, normal_pair):
        result = permutation_t_test(*normal_pair, R=10, seed=0)
        assert result.backend_name == 'cpu_permutation'
        for key in ('total_seconds', 'observed_stat', 'permutation_replicates', 'p_value'):
            assert key in result.timing


# ═══════════════════════════════════════════════════════════════════════
# Reproducibility and symmetry
# ═══════════════════════════════════════════════════════════════════════


class TestReproducibility:

    def test_same_seed_same_result(self, normal_pair):
        a = permutation_t_test(*normal_pair, R=99, seed=42)
        b = permutation_t_test(*normal_pair, R=99, seed=42)
        np.testing.assert_array_equal(a.perm_stats, b.perm_stats)
        assert a.p_value == b.p_value

    def test_different_seed_different_draws(self, normal_pair):
        a = permutation_t_test(*normal_pair, R=99, seed=1)
        b = permutation_t_test(*normal_pair, R=99, seed=2)
        assert not np.array_equal(a.perm_stats, b.perm_stats)

    def test_explicit_rng_is_advanced(self, normal_pair):
        rng = np.random.default_rng(5)
        a = permutation_t_test(*normal_pair, R=50, rng=rng)
        b = permutation_t_test(*normal_pair, R=50, rng=rng)
        assert not np.array_equal(a.perm_stats, b.perm_stats)

    def test_design_can_be_resolved(self, normal_pair):
        design = PermutationDesign.for_permutation_test(*normal_pair, R=30, seed=8)
        a = permutation_t_test(design)
        b = permutation_t_test(design)
        np.testing.assert_array_equal(a.perm_stats, b.perm_stats)

    def test_chunked_generation(self, rng, monkeypatch):
        import permsim.permutation.backends.cpu as cpu

        x, y = rng.normal(size=6), rng.normal(size=4)
        monkeypatch.setattr(cpu, "PERMUTATION_CHUNK_ELEMENTS", 25)
        assert cpu.permutation_chunks(7, 10) == [2, 2, 2, 1]
        result = permutation_t_test(x, y, R=7, seed=3)
        assert result.perm_stats.shape == (7,)
        assert np.all(np.isfinite(result.perm_stats))


class TestSwapInvariance:

    @pytest.mark.parametrize("var_equal", [True, False])
    def test_swap_flips_sign_keeps_p(self, rng, var_equal):
        x = rng.normal(0.0, 1.0, 9)
        y = rng.normal(0.5, 2.0, 14)
        a = permutation_t_test(x, y, var_equal=var_equal, R=299, seed=11)
        b = permutation_t_test(y, x, var_equal=var_equal, R=299, seed=11)
        assert b.observed_stat == pytest.approx(-a.observed_stat)
        np.testing.assert_allclose(b.perm_stats, -a.perm_stats)
        assert a.p_value == b.p_value

    def test_canonical_order(self):
        x, y = np.array([3.0, 1.0, 2.0]), np.array([5.0, 6.0])
        a, b, sign = canonical_order(x, y)
        assert a is y and b is x and sign == -1.0
        a, b, sign = canonical_order(y, x)
        assert a is y and b is x and sign == 1.0

    def test_chunks_cover_R(self):
        assert sum(permutation_chunks(10_000, 50)) == 10_000


# ═══════════════════════════════════════════════════════════════════════
# Degeneracy
# ═══════════════════════════════════════════════════════════════════════


class TestDegenerateInput:

    def test_size_one_group(self):
        with pytest.raises(NumericDegeneracyError) as exc_info:
            permutation_t_test([1.0], [2.0, 3.0, 4.0], R=10, seed=0)
        assert exc_info.value.reason == "too_few_observations"

    @pytest.mark.parametrize("var_equal", [True, False])
    def test_constant_groups(self, var_equal):
        with pytest.raises(NumericDegeneracyError) as exc_info:
            permutation_t_test(
                [2.0, 2.0, 2.0], [2.0, 2.0, 2.0, 2.0],
                var_equal=var_equal, R=10, seed=0,
            )
        assert exc_info.value.reason == "zero_denominator"

    def test_distinct_constants(self):
        with pytest.raises(NumericDegeneracyError):
            permutation_t_test([1.0, 1.0], [4.0, 4.0, 4.0], R=10, seed=0)

    @pytest.mark.parametrize("var_equal", [True, False])
    def test_small_spread_at_large_offset(self, var_equal):
        x = 1e10 + np.array([0.0, 1e-3, 2e-3, 3e-3])
        y = 1e10 + np.array([5e-3, 6e-3, 8e-3, 9e-3])
        result = permutation_t_test(x, y, var_equal=var_equal, R=99, seed=0)
        assert np.isfinite(result.observed_stat)
        assert np.all(np.isfinite(result.perm_stats))
        assert 0.0 < result.p_value <= 1.0


# ═══════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════


class TestValidation:

    def test_y_required(self):
        with pytest.raises(ValidationError, match="y is required"):
            permutation_t_test([1.0, 2.0])

    def test_zero_R(self, normal_pair):
        with pytest.raises(ValidationError, match="R must be >= 1"):
            permutation_t_test(*normal_pair, R=0)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="NaN"):
            permutation_t_test([1.0, np.nan, 2.0], [1.0, 2.0])

    def test_empty_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            permutation_t_test([], [1.0, 2.0])

    def test_2d_rejected(self):
        with pytest.raises(DimensionError):
            permutation_t_test(np.ones((2, 2)), [1.0, 2.0])

    def test_var_equal_must_be_bool(self, normal_pair):
        with pytest.raises(ValidationError, match="var_equal"):
            permutation_t_test(*normal_pair, var_equal="yes")

    def test_rng_type(self, normal_pair):
        with pytest.raises(ValidationError, match="rng"):
            permutation_t_test(*normal_pair, rng=np.random.RandomState(0))

    def test_unknown_backend(self, normal_pair):
        with pytest.raises(ValidationError, match="Unknown backend"):
            permutation_t_test(*normal_pair, backend='tpu')

    def test_cpu_backend(self):
        assert get_backend('cpu').name == 'cpu_permutation'

    def test_design_copies_input(self):
        x = np.array([1.0, 2.0, 3.0])
        design = PermutationDesign.for_permutation_test(x, [4.0, 5.0])
        x[0] = 100.0
        assert design.x[0] == 1.0


# ═══════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════


class TestDisplay:

    def test_welch_summary(self, normal_pair):
        text = permutation_t_test(*normal_pair, R=19, seed=0).summary()
        assert "Welch Two Sample permutation t-test" in text
        assert "p-value (two.sided)" in text
        assert "Number of permutations: 19" in text

    def test_pooled_summary(self, normal_pair):
        text = permutation_t_test(*normal_pair, var_equal=True, R=19, seed=0).summary()
        assert "\tTwo Sample permutation t-test" in text

    def test_repr(self, normal_pair):
        text = repr(permutation_t_test(*normal_pair, R=19, seed=0))
        assert text.startswith("PermutationSolution(R=19, statistic='Welch t'")
