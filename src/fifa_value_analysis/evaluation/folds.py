"""
Outer cross-validation fold partition shared by every model family.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoldPartition:
    """Row index → fold id, fixed for one evaluation run."""
    assignments: NDArray[np.int_]
    n_folds: int
    seed: Optional[int] = None

    def __post_init__(self):
        assignments = np.array(self.assignments, dtype=int)
        if assignments.ndim != 1:
            raise ValueError("fold assignments must be one-dimensional")
        if assignments.size and (assignments.min() < 0 or assignments.max() >= self.n_folds):
            raise ValueError(f"fold ids must lie in [0, {self.n_folds})")
        assignments.setflags(write=False)
        object.__setattr__(self, "assignments", assignments)

    @property
    def n_rows(self) -> int:
        return int(self.assignments.size)

    def test_indices(self, fold: int) -> NDArray[np.int_]:
        return np.flatnonzero(self.assignments == fold)

    def train_indices(self, fold: int) -> NDArray[np.int_]:
        return np.flatnonzero(self.assignments != fold)

    def split(self) -> Iterator[Tuple[NDArray[np.int_], NDArray[np.int_]]]:
        """Yield (train, test) index arrays, in fold order (sklearn ``cv`` compatible)."""
        for fold in range(self.n_folds):
            yield self.train_indices(fold), self.test_indices(fold)

    def sizes(self) -> NDArray[np.int_]:
        return np.bincount(self.assignments, minlength=self.n_folds)

    def to_series(self) -> pd.Series:
        return pd.Series(self.assignments, name="fold")


def make_folds(n_rows: int, n_folds: int, seed: Optional[int] = None) -> FoldPartition:
    """
    Assign each of ``n_rows`` rows to one of ``n_folds`` folds.

    Rows are shuffled with ``seed`` and dealt round-robin, so fold sizes
    differ by at most one. The same seed always yields the same partition.
    """
    if n_folds < 2:
        raise ValueError(f"need at least 2 folds, got {n_folds}")
    if n_folds > n_rows:
        raise ValueError(f"cannot split {n_rows} rows into {n_folds} folds")

    rng = np.random.default_rng(seed)
    order = rng.permutation(n_rows)
    assignments = np.empty(n_rows, dtype=int)
    assignments[order] = np.arange(n_rows) % n_folds

    logger.info("Partitioned %d rows into %d folds (seed=%s)", n_rows, n_folds, seed)
    return FoldPartition(assignments=assignments, n_folds=n_folds, seed=seed)
