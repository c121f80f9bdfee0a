"""
Wall-clock accounting for backends.

A backend opens one Timer per solve, wraps its stages in named sections and
hands ``Timer.result()`` to its Result. Stages that run once per replication
or once per permutation chunk share a name, so the result holds one total
per stage together with how often it ran.
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator, Mapping

TOTAL_KEY = 'total_seconds'


class Timer:
    """
    Per-stage wall-clock totals for one solve.

    Usage:
        timer = Timer()
        timer.start()
        for block in blocks:
            with timer.section('permutation_replicates'):
                ...
        timer.stop()
        timer.result()   # {'total_seconds': ..., 'permutation_replicates': ...}
        timer.counts     # {'permutation_replicates': len(blocks)}

    Args:
        sync: Called before every clock reading. A GPU backend passes
            ``torch.cuda.synchronize`` so queued kernels are charged to the
            stage that launched them.
    """

    def __init__(self, sync: Callable[[], None] | None = None):
        self._sync = sync
        self._totals: dict[str, float] = {}
        self._counts: dict[str, int] = {}
        self._t0: float | None = None
        self._elapsed: float | None = None

    def _now(self) -> float:
        if self._sync is not None:
            self._sync()
        return time.perf_counter()

    def start(self) -> None:
        self._t0 = self._now()

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._elapsed = self._now() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Charge the enclosed block to ``name``. Sections may nest."""
        began = self._now()
        try:
            yield
        finally:
            self.add(name, self._now() - began)

    def add(self, name: str, seconds: float, calls: int = 1) -> None:
        """Charge seconds measured elsewhere to ``name``."""
        self._totals[name] = self._totals.get(name, 0.0) + seconds
        self._counts[name] = self._counts.get(name, 0) + calls

    def merge(self, timing: Mapping[str, float]) -> None:
        """
        Fold a child solve's ``result()`` into this timer's stages.

        The child's own total is dropped; the caller times the child as a
        whole with a section of its own.
        """
        for name, seconds in timing.items():
            if name != TOTAL_KEY:
                self.add(name, seconds)

    @property
    def counts(self) -> dict[str, int]:
        """Number of times each stage was charged."""
        return dict(self._counts)

    def result(self) -> dict[str, float]:
        """Elapsed total under ``'total_seconds'`` plus one entry per stage."""
        if self._elapsed is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {TOTAL_KEY: self._elapsed, **self._totals}
