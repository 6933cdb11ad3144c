"""
k-nearest-neighbours regression with k chosen by its own inner cross-validation.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence

from numpy.typing import NDArray
from sklearn.neighbors import KNeighborsRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from fifa_value_analysis.config import config
from fifa_value_analysis.models.base import ModelAdapter


class KNNAdapter(ModelAdapter):
    """Standardised features, uniform-weight neighbour average."""

    name = "knn"

    def __init__(self, *, k_grid: Optional[Sequence[int]] = None, **kwargs):
        super().__init__(**kwargs)
        self.k_grid = sorted(int(k) for k in (config.KNN_GRID if k_grid is None else k_grid))

    def build_estimator(self, X: NDArray) -> Pipeline:
        return Pipeline([
            ("scale", StandardScaler()),
            ("model", KNeighborsRegressor()),
        ])

    def param_grid(self, X: NDArray, y: NDArray) -> Dict[str, List[Any]]:
        # every inner training split must hold at least k rows
        n_splits = min(self.inner_cv_folds, len(y))
        smallest_train = len(y) - math.ceil(len(y) / max(n_splits, 1))
        return {"model__n_neighbors": [k for k in self.k_grid if k <= smallest_train]}

    def minimum_rows(self, X: NDArray, params: Dict[str, Any]) -> int:
        return int(params.get("model__n_neighbors", self.k_grid[0]))
