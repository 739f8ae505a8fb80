"""
Reductions and thread control for the numba data-parallel passes.

Particle passes are `numba.njit(parallel=True)` kernels looping `prange` over
particles or over fixed-size blocks of a sample. A blocked reduction writes one
row of partials per block (disjoint writes, no atomics) starting from each
`Reduction`'s identity; the host then merges the rows with the declared
`combine`, so the result never depends on how blocks were scheduled.
"""

import math
import operator
from dataclasses import dataclass
from functools import reduce
from typing import Any, Callable, Optional, Sequence, Tuple

import numba
import numpy as np

BLOCK_SIZE = 4096


@dataclass(frozen=True)
class Reduction:
    """An associative, commutative combine function with its identity."""

    combine: Callable[[Any, Any], Any]
    identity: Any

    def fold(self, partials) -> Any:
        return reduce(self.combine, partials, self.identity)


SUM = Reduction(combine=operator.add, identity=0.0)
MAX = Reduction(combine=max, identity=-math.inf)


def block_count(n: int, block_size: int = BLOCK_SIZE) -> int:
    return (n + block_size - 1) // block_size


def partial_buffer(n: int, reductions: Sequence[Reduction], block_size: int = BLOCK_SIZE):
    """(initial row, empty (blocks, k) partials array) for a blocked kernel."""
    init = np.array([r.identity for r in reductions], dtype=np.float64)
    partials = np.empty((block_count(n, block_size), len(reductions)), dtype=np.float64)
    return init, partials


def merge_blocks(partials: np.ndarray, reductions: Sequence[Reduction]) -> Tuple[Any, ...]:
    """Merge per-block partial rows column by column.

    An empty partials array yields the identities.
    """
    return tuple(
        r.fold(float(v) for v in partials[:, j]) for j, r in enumerate(reductions)
    )


def set_workers(workers: Optional[int] = None) -> int:
    """Cap the threads used by parallel kernels. Returns the count in effect.

    `None` keeps numba's current setting; requests above the launch-time
    maximum (NUMBA_NUM_THREADS) are clamped to it.
    """
    if workers is not None:
        numba.set_num_threads(max(1, min(int(workers), numba.config.NUMBA_NUM_THREADS)))
    return numba.get_num_threads()
