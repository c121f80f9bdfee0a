"""
GPU backend for the permutation t test.

The permutation distribution is embarrassingly parallel: every block of
permutations is generated by argsorting uniform keys on the device and
both t statistics are reductions over the last axis, so all R statistics
are computed in a handful of kernels.

The observed statistic, the degeneracy rules and the p-value are shared
with the CPU backend. Results are reproducible for a given seed and
device but are not bit-identical to the CPU backend, which draws its
permutations from a different generator.

Skipped if no GPU (CUDA or MPS) is available.
"""

from __future__ import annotations

import numpy as np

from permsim.core.exceptions import NumericDegeneracyError
from permsim.core.result import Result
from permsim.core.compute.streams import make_generator
from permsim.core.compute.timing import Timer
from permsim.permutation._common import (
    EXTREMITY_RTOL,
    FLOAT32_EXTREMITY_RTOL,
    PermutationParams,
    two_sided_p_value,
)
from permsim.permutation.backends.cpu import canonical_order, permutation_chunks
from permsim.permutation.design import PermutationDesign


class GPUPermutationBackend:
    """
    GPU backend for permutation testing.

    Args:
        device: 'cuda', 'mps', or 'auto'
    """

    def __init__(self, device: str = 'auto'):
        import torch

        self._torch = torch

        if device == 'auto':
            if torch.cuda.is_available():
                self._device = 'cuda'
            elif hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
                self._device = 'mps'
            else:
                raise RuntimeError("No GPU available (need CUDA or MPS)")
        else:
            self._device = device

        # MPS has no float64 kernels
        self._dtype = torch.float32 if self._device == 'mps' else torch.float64

    @property
    def name(self) -> str:
        return f'gpu_{self._device}_permutation'

    def solve(self, design: PermutationDesign) -> Result[PermutationParams]:
        """Run permutation test on the GPU and return Result[PermutationParams]."""
        torch = self._torch
        timer = Timer(sync=torch.cuda.synchronize if self._device == 'cuda' else None)
        timer.start()

        statistic = design.statistic
        R = design.R
        rng = design.rng if design.rng is not None else make_generator(design.seed)

        a, b, sign = canonical_order(design.x, design.y)
        n_a = a.shape[0]

        with timer.section('observed_stat'):
            observed = sign * statistic(a, b)

        with timer.section('permutation_replicates'):
            gen = torch.Generator(device=self._device)
            gen.manual_seed(int(rng.integers(0, 2**63 - 1)))

            combined = torch.as_tensor(
                np.concatenate([a, b]), dtype=self._dtype, device=self._device,
            )
            n = combined.shape[0]
            chunks = []
            for rows in permutation_chunks(R, n):
                keys = torch.rand(
                    (rows, n), generator=gen, device=self._device,
                    dtype=self._dtype,
                )
                block = combined[torch.argsort(keys, dim=1)]
                chunks.append(self._batched_t(
                    block[:, :n_a], block[:, n_a:], design,
                ))
            perm_stats = sign * torch.cat(chunks).cpu().numpy().astype(np.float64)

        # Replicates carry float32 rounding on MPS; the observed value does not
        rtol = FLOAT32_EXTREMITY_RTOL if self._dtype == torch.float32 else EXTREMITY_RTOL
        with timer.section('p_value'):
            p_value, count = two_sided_p_value(observed, perm_stats, rtol=rtol)

        timer.stop()

        warnings_list: list[str] = []
        if self._dtype == torch.float32:
            warnings_list.append(
                "permutation statistics computed in float32 on MPS"
            )

        params = PermutationParams(
            observed_stat=float(observed),
            perm_stats=perm_stats,
            p_value=p_value,
            n_extreme=count,
            R=R,
            statistic_name=design.statistic_name,
            var_equal=design.var_equal,
        )

        return Result(
            params=params,
            info={
                'n1': design.n1,
                'n2': design.n2,
                'variance': design.variance,
                'seed': design.seed,
                'device': self._device,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )

    def _batched_t(self, xa, xb, design: PermutationDesign):
        """Pooled or Welch t for each row pair of two (rows, n) tensors."""
        torch = self._torch
        n1, n2 = xa.shape[1], xb.shape[1]
        # Shifted moments, as in _statistics: constant rows give exactly 0
        origin = xa[:, :1]
        diff = (xa - origin).mean(dim=1) - (xb - origin).mean(dim=1)
        var1 = (xa - xa[:, :1]).var(dim=1)
        var2 = (xb - xb[:, :1]).var(dim=1)

        if design.var_equal:
            sp2 = ((n1 - 1) * var1 + (n2 - 1) * var2) / (n1 + n2 - 2)
            se = torch.sqrt(sp2 * (1.0 / n1 + 1.0 / n2))
        else:
            se = torch.sqrt(var1 / n1 + var2 / n2)

        degenerate = ~(se > 0.0)
        if bool(degenerate.any()):
            raise NumericDegeneracyError(
                f"{design.statistic_name}: standard error is zero in "
                f"{int(degenerate.sum())} permuted group pair(s)",
                statistic=design.statistic_name, n1=design.n1, n2=design.n2,
                reason="zero_denominator",
            )
        return diff / se
