"""
Linear model families: ordinary least squares, ridge and lasso.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray
from sklearn.linear_model import Lasso, LinearRegression, Ridge
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from fifa_value_analysis.config import config
from fifa_value_analysis.exceptions import ModelFitError
from fifa_value_analysis.models.base import FittedModel, ModelAdapter


class LinearAdapter(ModelAdapter):
    """Ordinary least squares over every design column, no regularisation."""

    name = "linear"

    def build_estimator(self, X: NDArray) -> LinearRegression:
        return LinearRegression()

    def minimum_rows(self, X: NDArray, params: Dict[str, Any]) -> int:
        return X.shape[1] + 1

    def _fit(self, X: NDArray, y: NDArray, fold: Optional[int]) -> FittedModel:
        design = np.column_stack([np.ones(len(X)), X])
        rank = np.linalg.matrix_rank(design)
        if rank < design.shape[1]:
            raise ModelFitError(
                self.name, fold,
                f"rank-deficient design: rank {rank} < {design.shape[1]} columns (incl. intercept)",
            )
        return super()._fit(X, y, fold)


class PenalizedAdapter(ModelAdapter):
    """Standardised penalised least squares with the penalty picked from a log grid."""

    def __init__(self, *, penalty_grid: Optional[Sequence[float]] = None, **kwargs):
        super().__init__(**kwargs)
        grid = config.PENALTY_GRID if penalty_grid is None else penalty_grid
        self.penalty_grid = [float(a) for a in grid]

    def build_estimator(self, X: NDArray) -> Pipeline:
        return Pipeline([
            ("scale", StandardScaler()),
            ("model", self._make_model()),
        ])

    def _make_model(self):
        raise NotImplementedError

    def param_grid(self, X: NDArray, y: NDArray) -> Dict[str, List[Any]]:
        return {"model__alpha": list(self.penalty_grid)}


class RidgeAdapter(PenalizedAdapter):
    name = "ridge"

    def _make_model(self):
        return Ridge()


class LassoAdapter(PenalizedAdapter):
    name = "lasso"

    def _make_model(self):
        return Lasso(max_iter=50_000)
