"""
Uniform fit/predict contract shared by every model family.

An adapter keeps only its selected hyper-parameters between folds. Fitted
estimators are returned to the caller as ``FittedModel`` values and never
stored on the adapter.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

import numpy as np
from numpy.typing import NDArray
from sklearn.dummy import DummyRegressor
from sklearn.model_selection import GridSearchCV, KFold

from fifa_value_analysis.config import config
from fifa_value_analysis.exceptions import DegenerateFoldError, ModelFitError

if TYPE_CHECKING:
    from fifa_value_analysis.evaluation.folds import FoldPartition

logger = logging.getLogger(__name__)

SELECTION_SCOPES = ("global", "nested")


@dataclass(frozen=True)
class FittedModel:
    """One fold's trained estimator and the hyper-parameters it used."""
    estimator: Any
    params: Dict[str, Any] = field(default_factory=dict)


class ModelAdapter:
    """Base class: subclasses provide ``build_estimator`` and optionally a grid."""

    name: str = "model"
    min_train_rows: int = 2
    # True when the grid is searched inside every fold regardless of scope
    always_per_fold: bool = False

    def __init__(
        self,
        *,
        random_state: Optional[int] = config.RANDOM_STATE,
        selection_scope: str = config.SELECTION_SCOPE,
        inner_cv_folds: int = config.INNER_CV_FOLDS,
    ):
        if selection_scope not in SELECTION_SCOPES:
            raise ValueError(f"selection_scope must be one of {SELECTION_SCOPES}, got {selection_scope!r}")
        self.random_state = random_state
        self.selection_scope = selection_scope
        self.inner_cv_folds = inner_cv_folds
        self.selected_params_: Dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, scope={self.selection_scope!r})"

    # ------------------------------------------------------------------
    # Hooks for subclasses
    # ------------------------------------------------------------------
    def build_estimator(self, X: NDArray) -> Any:
        """Unfitted estimator; grid points are applied with ``set_params``."""
        raise NotImplementedError

    def param_grid(self, X: NDArray, y: NDArray) -> Dict[str, List[Any]]:
        """Candidate hyper-parameters; empty means nothing to select."""
        return {}

    def minimum_rows(self, X: NDArray, params: Dict[str, Any]) -> int:
        return self.min_train_rows

    def selection_cv(self, n_rows: int, partition: Optional[FoldPartition], fold: Optional[int] = None) -> Any:
        """Inner resampling scheme used to score the grid."""
        n_splits = min(self.inner_cv_folds, n_rows)
        if n_splits < 2:
            raise DegenerateFoldError(self.name, fold, n_rows, 2)
        return KFold(n_splits=n_splits, shuffle=True, random_state=self.random_state)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def has_grid(self) -> bool:
        return type(self).param_grid is not ModelAdapter.param_grid

    @property
    def tunes_globally(self) -> bool:
        return self.has_grid and not self.always_per_fold and self.selection_scope == "global"

    def select(
        self,
        X: NDArray,
        y: NDArray,
        fold: Optional[int] = None,
        partition: Optional[FoldPartition] = None,
    ) -> Dict[str, Any]:
        """Pick the grid point with the lowest cross-validated MSE."""
        grid = self.param_grid(X, y)
        if not grid:
            return {}
        if any(len(values) == 0 for values in grid.values()):
            raise ModelFitError(self.name, fold, f"empty hyper-parameter grid {sorted(grid)}")

        search = GridSearchCV(
            self.build_estimator(X),
            grid,
            scoring="neg_mean_squared_error",
            cv=self.selection_cv(len(y), partition, fold),
            refit=False,
            error_score="raise",
        )
        search.fit(X, y)
        return dict(search.best_params_)

    def prepare(self, X: NDArray, y: NDArray, partition: Optional[FoldPartition] = None) -> None:
        """
        Run-level hyper-parameter selection over the whole dataset.

        Only used in the "global" scope, where the chosen values are then
        reused by every outer fold. This lets the selection see rows that are
        later predicted out-of-fold; use the "nested" scope to avoid that.
        """
        self.selected_params_ = {}
        if not self.tunes_globally:
            return
        try:
            self.selected_params_ = self.select(X, y, None, partition)
        except (ValueError, np.linalg.LinAlgError) as exc:
            raise ModelFitError(self.name, None, str(exc)) from exc
        logger.info("%s selected %s on the full dataset", self.name, self.selected_params_)

    # ------------------------------------------------------------------
    # Fit / predict contract
    # ------------------------------------------------------------------
    def _fit(self, X: NDArray, y: NDArray, fold: Optional[int]) -> FittedModel:
        if self.has_grid and not self.tunes_globally:
            params = self.select(X, y, fold)
        else:
            params = dict(self.selected_params_)
        minimum = self.minimum_rows(X, params)
        if len(y) < minimum:
            raise DegenerateFoldError(self.name, fold, len(y), minimum)
        estimator = self.build_estimator(X).set_params(**params)
        estimator.fit(X, y)
        return FittedModel(estimator=estimator, params=params)

    def fit(self, X: NDArray, y: NDArray, fold: Optional[int] = None) -> FittedModel:
        """Train on ``X``/``y``; raises ``ModelFitError`` naming model and fold."""
        if len(y) < self.min_train_rows:
            raise DegenerateFoldError(self.name, fold, len(y), self.min_train_rows)
        if self.tunes_globally and not self.selected_params_:
            raise ModelFitError(self.name, fold, "prepare() must run before fit()")
        try:
            return self._fit(X, y, fold)
        except (ValueError, np.linalg.LinAlgError) as exc:
            raise ModelFitError(self.name, fold, str(exc)) from exc

    def predict(self, state: FittedModel, X: NDArray, fold: Optional[int] = None) -> NDArray[np.float64]:
        try:
            predictions = np.asarray(state.estimator.predict(X), dtype=float)
        except (ValueError, np.linalg.LinAlgError) as exc:
            raise ModelFitError(self.name, fold, str(exc)) from exc
        if not np.all(np.isfinite(predictions)):
            raise ModelFitError(self.name, fold, "non-finite predictions")
        return predictions


class MeanBaselineAdapter(ModelAdapter):
    """Constant prediction: the training-fold mean of the target."""

    name = "mean_baseline"
    min_train_rows = 1

    def build_estimator(self, X: NDArray) -> DummyRegressor:
        return DummyRegressor(strategy="mean")


def adapter_names(adapters: Iterable[ModelAdapter]) -> List[str]:
    """Names in order; raises on duplicates since they key every result table."""
    names = [a.name for a in adapters]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"duplicate model names: {duplicates}")
    return names
