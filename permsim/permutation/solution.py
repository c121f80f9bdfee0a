"""
Solution wrapper for permutation t test results.

PermutationSolution wraps Result[PermutationParams] and provides
convenient accessors and a printable summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from permsim.core.result import Result
from permsim.permutation._common import PermutationParams

if TYPE_CHECKING:
    from permsim.permutation.design import PermutationDesign


@dataclass
class PermutationSolution:
    """
    User-facing permutation test results.

    Provides observed statistic, permutation distribution, and p-value.
    """
    _result: Result[PermutationParams]
    _design: 'PermutationDesign'

    # --- Core fields ---

    @property
    def observed_stat(self) -> float:
        """Test statistic on original (unpermuted) data."""
        return self._result.params.observed_stat

    @property
    def perm_stats(self) -> NDArray[np.floating[Any]]:
        """Permutation distribution, shape (R,)."""
        return self._result.params.perm_stats

    @property
    def p_value(self) -> float:
        """Two-sided permutation p-value, (count + 1) / (R + 1)."""
        return self._result.params.p_value

    @property
    def n_extreme(self) -> int:
        """Permutations with |T_i| >= |T_obs| (without the observed one)."""
        return self._result.params.n_extreme

    @property
    def R(self) -> int:
        """Number of permutations."""
        return self._result.params.R

    @property
    def var_equal(self) -> bool:
        return self._result.params.var_equal

    @property
    def statistic_name(self) -> str:
        """'pooled t' or 'Welch t'."""
        return self._result.params.statistic_name

    # --- Metadata ---

    @property
    def n1(self) -> int:
        return self._design.n1

    @property
    def n2(self) -> int:
        return self._design.n2

    @property
    def seed(self) -> int | None:
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """Permutation test summary."""
        method = (
            "Two Sample permutation t-test"
            if self.var_equal
            else "Welch Two Sample permutation t-test"
        )
        lines = [
            "",
            f"\t{method}",
            "",
            f"n1 = {self.n1}, n2 = {self.n2}",
            f"Number of permutations: {self.R}",
            f"Observed {self.statistic_name}: {self.observed_stat:.6g}",
            f"p-value (two.sided): {self.p_value:.4g}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"PermutationSolution(R={self.R}, "
            f"statistic={self.statistic_name!r}, "
            f"observed={self.observed_stat:.4g}, "
            f"p_value={self.p_value:.4g})"
        )
