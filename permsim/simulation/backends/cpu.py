"""
CPU backends for the Type I error simulation.

CPUSimulationBackend: replication loop for one scenario and variance
assumption.
CPUSweepBackend: runs every (scenario, variance) cell, optionally across
processes with joblib, and assembles the results table.
"""

from __future__ import annotations

import logging
from collections import Counter

import numpy as np

from permsim.core.exceptions import NumericDegeneracyError
from permsim.core.result import Result
from permsim.core.compute.streams import replication_streams
from permsim.core.compute.timing import Timer
from permsim.permutation.design import PermutationDesign
from permsim.permutation.solvers import get_backend as get_permutation_backend
from permsim.sampling.sources import check_draw, get_source
from permsim.simulation._common import (
    RejectionParams,
    ScenarioResult,
    SweepParams,
    SweepRow,
)
from permsim.simulation.design import SimulationDesign, SweepDesign

logger = logging.getLogger(__name__)


class CPUSimulationBackend:
    """
    CPU backend for the replication loop.

    Replication k draws both samples from its own sampling stream and its
    permutations from its own permutation stream (children of the design's
    seed sequence), so replications share no random state.
    """

    @property
    def name(self) -> str:
        return 'cpu_simulation'

    def solve(self, design: SimulationDesign) -> Result[RejectionParams]:
        """
        Run nreps replications and return Result[RejectionParams].

        Raises:
            SamplingError: Propagated unchanged from the sample source
            NumericDegeneracyError: With on_error='raise', on the first
                degenerate replication; with 'record', when every
                replication failed or the failed share exceeds
                max_failure_rate
        """
        timer = Timer()
        timer.start()

        scenario = design.scenario
        source = design.sampler if design.sampler is not None else get_source(scenario.family)
        perm_backend = get_permutation_backend(design.backend)

        p_values: list[float] = []
        failures: Counter[str] = Counter()

        streams = replication_streams(design.seed_sequence, design.nreps)
        for rep, (rng_sample, rng_perm) in enumerate(streams):
            with timer.section('sampling'):
                a = check_draw(source.family, scenario.n1, source.draw(
                    scenario.n1, 0.0, scenario.scale1, scenario.shape, rng_sample,
                ))
                b = check_draw(source.family, scenario.n2, source.draw(
                    scenario.n2, 0.0, scenario.scale2, scenario.shape, rng_sample,
                ))

            try:
                with timer.section('permutation_tests'):
                    perm_design = PermutationDesign.for_permutation_test(
                        a, b, var_equal=design.var_equal, R=design.R, rng=rng_perm,
                    )
                    result = perm_backend.solve(perm_design)
            except NumericDegeneracyError as e:
                if design.on_error == 'raise':
                    raise
                failures[e.reason or 'unknown'] += 1
                logger.debug(
                    "%s [%s]: replication %d failed: %s",
                    design.label(), design.variance, rep, e,
                )
                continue

            p_values.append(result.params.p_value)

        n_completed = len(p_values)
        n_failed = sum(failures.values())

        if n_completed == 0:
            raise NumericDegeneracyError(
                f"{design.label()} [{design.variance}]: all {design.nreps} "
                f"replications failed ({dict(failures)})",
                n1=scenario.n1, n2=scenario.n2, reason='all_replications_failed',
            )
        if n_failed / design.nreps > design.max_failure_rate:
            raise NumericDegeneracyError(
                f"{design.label()} [{design.variance}]: {n_failed} of "
                f"{design.nreps} replications failed, more than "
                f"max_failure_rate={design.max_failure_rate}",
                n1=scenario.n1, n2=scenario.n2, reason='failure_rate_exceeded',
            )

        warnings_list: list[str] = []
        if n_failed:
            warnings_list.append(
                f"{n_failed} of {design.nreps} replications failed with "
                f"NumericDegeneracyError ({dict(failures)}); rejection rate "
                f"is over {n_completed} completed replications"
            )

        p_arr = np.asarray(p_values, dtype=np.float64)
        n_rejected = int(np.sum(p_arr < design.alpha))

        timer.stop()

        params = RejectionParams(
            rejection_rate=n_rejected / n_completed,
            n_rejected=n_rejected,
            n_completed=n_completed,
            n_failed=n_failed,
            p_values=p_arr,
            failure_reasons=dict(failures),
        )

        return Result(
            params=params,
            info={
                'scenario': scenario,
                'family': design.family_name,
                'variance': design.variance,
                'nreps': design.nreps,
                'R': design.R,
                'alpha': design.alpha,
                'entropy': design.seed_sequence.entropy,
                'spawn_key': design.seed_sequence.spawn_key,
                'permutation_backend': perm_backend.name,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def _solve_cell(design: SimulationDesign) -> Result[RejectionParams]:
    return CPUSimulationBackend().solve(design)


class CPUSweepBackend:
    """
    CPU backend for the scenario sweep.

    Cells are independent; with n_jobs != 1 they run in joblib worker
    processes. Cell seeds are fixed by position in the table, so the
    results table is the same for any n_jobs.
    """

    @property
    def name(self) -> str:
        return 'cpu_sweep'

    def solve(self, design: SweepDesign) -> Result[SweepParams]:
        """Run every (scenario, variance) cell and return Result[SweepParams]."""
        timer = Timer()
        timer.start()

        cells = design.cells()

        with timer.section('simulation_cells'):
            if design.n_jobs == 1:
                cell_results = [_solve_cell(cell) for cell in cells]
            else:
                from joblib import Parallel, delayed

                cell_results = Parallel(n_jobs=design.n_jobs, backend="loky")(
                    delayed(_solve_cell)(cell) for cell in cells
                )

        results: list[ScenarioResult] = []
        warnings_list: list[str] = []
        for cell, res in zip(cells, cell_results):
            p = res.params
            results.append(ScenarioResult(
                scenario=cell.scenario,
                variance=cell.variance,
                rejection_rate=p.rejection_rate,
                n_rejected=p.n_rejected,
                n_completed=p.n_completed,
                n_failed=p.n_failed,
            ))
            warnings_list.extend(
                f"{cell.label()} [{cell.variance}]: {w}" for w in res.warnings
            )
            timer.merge(res.timing or {})
            logger.info(
                "%s [%s]: rejection rate %.4f (%d/%d)",
                cell.label(), cell.variance,
                p.rejection_rate, p.n_rejected, p.n_completed,
            )

        rows = []
        for i, scenario in enumerate(design.scenarios):
            equal, unequal = results[2 * i], results[2 * i + 1]
            rows.append(SweepRow(
                n1=scenario.n1,
                n2=scenario.n2,
                scale1=scenario.scale1,
                scale2=scenario.scale2,
                family=cells[2 * i].family_name,
                shape=scenario.shape,
                equal_rate=equal.rejection_rate,
                unequal_rate=unequal.rejection_rate,
            ))

        timer.stop()

        params = SweepParams(
            rows=tuple(rows),
            results=tuple(results),
            alpha=design.alpha,
            nreps=design.nreps,
            R=design.R,
        )

        return Result(
            params=params,
            info={
                'n_scenarios': len(design.scenarios),
                'n_cells': len(cells),
                'n_jobs': design.n_jobs,
                'entropy': design.seed_sequence.entropy,
                'n_failed': sum(r.n_failed for r in results),
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
