"""
Tests for scenario_sweep.

Validates:
    - One row per scenario, in input order, with both rejection rates
    - Results do not depend on n_jobs
    - Rendering (summary, table, to_frame) and logging
    - Calibration over the standard table (slow)
"""

import logging

import numpy as np
import pytest

from permsim.core.exceptions import InvalidScenarioError, NumericDegeneracyError
from permsim.simulation import (
    Scenario,
    SweepDesign,
    SweepSolution,
    scenario_sweep,
    simulate_type1_error,
    standard_scenarios,
)


SMALL_TABLE = [
    (10, 10, 1.0, 1.0),
    (8, 16, 1.0, 3.0),
    (12, 12, 2.0, 1.0, "skew_normal"),
]


@pytest.fixture(scope="module")
def small_sweep():
    return scenario_sweep(SMALL_TABLE, nreps=12, R=29, seed=99)


class TestSweepRows:

    def test_type(self, small_sweep):
        assert isinstance(small_sweep, SweepSolution)

    def test_row_order(self, small_sweep):
        rows = small_sweep.rows
        assert [(r.n1, r.n2) for r in rows] == [(10, 10), (8, 16), (12, 12)]
        assert rows[2].family == "skew_normal"
        assert rows[2].shape == 5.0

    def test_rates_in_unit_interval(self, small_sweep):
        for r in small_sweep.rows:
            assert 0.0 <= r.equal_rate <= 1.0
            assert 0.0 <= r.unequal_rate <= 1.0

    def test_results_scenario_major(self, small_sweep):
        results = small_sweep.results
        assert len(results) == 6
        assert [r.variance for r in results] == ["equal", "unequal"] * 3
        assert results[2].scenario == Scenario(8, 16, 1.0, 3.0)

    def test_table(self, small_sweep):
        table = small_sweep.table
        assert table.shape == (3, 2)
        assert table[1, 0] == small_sweep.rows[1].equal_rate
        assert table[1, 1] == small_sweep.rows[1].unequal_rate

    def test_metadata(self, small_sweep):
        assert small_sweep.backend_name == 'cpu_sweep'
        assert small_sweep.info['n_cells'] == 6
        assert small_sweep.n_failed == 0
        assert small_sweep.nreps == 12
        assert small_sweep.R == 29
        assert small_sweep.alpha == 0.05
        assert 'simulation_cells' in small_sweep.timing
        assert 'sampling' in small_sweep.timing


class TestSweepDeterminism:

    def test_same_seed_same_table(self, small_sweep):
        again = scenario_sweep(SMALL_TABLE, nreps=12, R=29, seed=99)
        np.testing.assert_array_equal(again.table, small_sweep.table)

    def test_n_jobs_does_not_change_results(self, small_sweep):
        parallel = scenario_sweep(SMALL_TABLE, nreps=12, R=29, seed=99, n_jobs=2)
        np.testing.assert_array_equal(parallel.table, small_sweep.table)

    def test_cell_matches_single_simulation(self):
        design = SweepDesign.for_sweep(SMALL_TABLE, nreps=12, R=29, seed=99)
        cell = design.cells()[3]
        single = simulate_type1_error(cell)
        sweep = scenario_sweep(design)
        assert sweep.rows[1].unequal_rate == single.rejection_rate

    def test_row_independent_of_table_position_neighbours(self):
        a = scenario_sweep(SMALL_TABLE, nreps=8, R=19, seed=3)
        b = scenario_sweep(SMALL_TABLE[:2], nreps=8, R=19, seed=3)
        np.testing.assert_array_equal(a.table[:2], b.table)


class TestSweepErrors:

    def test_invalid_row_before_any_work(self):
        with pytest.raises(InvalidScenarioError) as exc_info:
            scenario_sweep([(10, 10, 1.0, 1.0), (10, 0, 1.0, 1.0)], nreps=2, R=9)
        assert exc_info.value.field == "n2"

    def test_failing_cell_propagates(self):
        with pytest.raises(NumericDegeneracyError):
            scenario_sweep([(10, 10, 1.0, 1.0), (1, 5, 1.0, 1.0)], nreps=2, R=9, seed=1)


class TestSweepDisplay:

    def test_summary(self, small_sweep):
        text = small_sweep.summary()
        assert "EMPIRICAL TYPE I ERROR (alpha = 0.05, nreps = 12, R = 29)" in text
        assert "skew_normal(5)" in text
        assert "unequal" in text

    def test_repr(self, small_sweep):
        assert repr(small_sweep) == "SweepSolution(n_scenarios=3, nreps=12, R=29, alpha=0.05)"

    def test_to_frame(self, small_sweep):
        pytest.importorskip("pandas")
        frame = small_sweep.to_frame()
        assert list(frame.columns) == [
            'n1', 'n2', 'scale1', 'scale2', 'family', 'shape',
            'equal_rate', 'unequal_rate',
        ]
        assert len(frame) == 3
        assert frame['n2'].tolist() == [10, 16, 12]

    def test_info_logging(self, caplog):
        with caplog.at_level(logging.INFO, logger="permsim.simulation"):
            scenario_sweep([(10, 10, 1.0, 1.0)], nreps=3, R=9, seed=1)
        messages = [r.getMessage() for r in caplog.records]
        assert any("[equal]: rejection rate" in m for m in messages)
        assert any("[unequal]: rejection rate" in m for m in messages)


class StudentTSource:
    """Scaled Student t draws with 5 degrees of freedom."""

    @property
    def family(self):
        return "student_t"

    def draw(self, n, mean, scale, shape, rng):
        return mean + scale * rng.standard_t(5, size=n)


class TestSweepWithSampler:

    @pytest.fixture(scope="class")
    def t_sweep(self):
        return scenario_sweep(
            [(10, 10, 1.0, 1.0), (12, 12, 2.0, 1.0, "skew_normal")],
            nreps=6, R=19, seed=4, sampler=StudentTSource(),
        )

    def test_rows_name_the_sampler_family(self, t_sweep):
        assert [r.family for r in t_sweep.rows] == ["student_t", "student_t"]

    def test_summary_names_the_sampler_family(self, t_sweep):
        text = t_sweep.summary()
        assert "student_t" in text
        assert "skew_normal" not in text
        assert "normal " not in text

    def test_log_and_solution_labels(self, caplog):
        with caplog.at_level(logging.INFO, logger="permsim.simulation"):
            scenario_sweep(
                [(10, 10, 1.0, 1.0)], nreps=3, R=9, seed=1, sampler=StudentTSource(),
            )
        messages = [r.getMessage() for r in caplog.records]
        assert any("sd=(1, 1) student_t [equal]" in m for m in messages)

        single = simulate_type1_error(
            (10, 10, 1.0, 1.0), nreps=3, R=9, seed=1, sampler=StudentTSource(),
        )
        assert "n=(10, 10) sd=(1, 1) student_t" in single.summary()
        assert single.info['family'] == "student_t"


@pytest.mark.slow
class TestCalibration:

    @pytest.fixture(scope="class")
    def standard_sweep(self):
        return scenario_sweep(nreps=1500, R=199, seed=11, n_jobs=-1)

    def test_welch_within_band_on_every_row(self, standard_sweep):
        assert len(standard_sweep.rows) == len(standard_scenarios())
        welch = standard_sweep.table[:, 1]
        # 1500 replications give a Monte Carlo s.e. of about 0.0056 at 0.05
        assert np.all(np.abs(welch - 0.05) <= 0.025), welch

    def test_pooled_anti_conservative_when_small_group_is_noisier(self, standard_sweep):
        row = next(
            i for i, r in enumerate(standard_sweep.rows)
            if (r.n1, r.n2, r.scale1, r.scale2, r.family) == (10, 40, 4.0, 1.0, "normal")
        )
        assert standard_sweep.table[row, 0] > 0.1
