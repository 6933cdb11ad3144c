"""
Tree-based model families: a cost-complexity pruned regression tree and a
random forest.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np
from numpy.typing import NDArray
from sklearn.ensemble import RandomForestRegressor
from sklearn.tree import DecisionTreeRegressor

from fifa_value_analysis.config import config
from fifa_value_analysis.models.base import FittedModel, ModelAdapter

logger = logging.getLogger(__name__)


class DecisionTreeAdapter(ModelAdapter):
    """
    Regression tree pruned per fold.

    The candidate complexity parameters are the breakpoints of the tree's own
    cost-complexity pruning path on the training rows; the one with the
    lowest inner cross-validated MSE is used to grow the pruned tree.
    """

    name = "tree"
    always_per_fold = True

    def __init__(
        self,
        *,
        min_samples_split: int = config.TREE_MIN_SAMPLES_SPLIT,
        min_samples_leaf: int = config.TREE_MIN_SAMPLES_LEAF,
        max_candidates: int = config.TREE_MAX_CANDIDATES,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.min_samples_split = min_samples_split
        self.min_samples_leaf = min_samples_leaf
        self.max_candidates = max_candidates

    def build_estimator(self, X: NDArray) -> DecisionTreeRegressor:
        return DecisionTreeRegressor(
            min_samples_split=self.min_samples_split,
            min_samples_leaf=self.min_samples_leaf,
            random_state=self.random_state,
        )

    def pruning_candidates(self, X: NDArray, y: NDArray) -> List[float]:
        """Distinct ccp_alpha breakpoints, thinned to at most ``max_candidates``."""
        path = self.build_estimator(X).cost_complexity_pruning_path(X, y)
        alphas = np.unique(np.clip(path.ccp_alphas, 0.0, None))
        if len(alphas) > self.max_candidates:
            picks = np.linspace(0, len(alphas) - 1, self.max_candidates).round().astype(int)
            alphas = alphas[np.unique(picks)]
        return [float(a) for a in alphas]

    def param_grid(self, X: NDArray, y: NDArray) -> Dict[str, List[Any]]:
        return {"ccp_alpha": self.pruning_candidates(X, y)}

    def _fit(self, X: NDArray, y: NDArray, fold: Optional[int]) -> FittedModel:
        fitted = super()._fit(X, y, fold)
        logger.debug(
            "tree fold %s: ccp_alpha=%.4g, %d leaves",
            fold, fitted.params["ccp_alpha"], fitted.estimator.get_n_leaves(),
        )
        return fitted


class RandomForestAdapter(ModelAdapter):
    """Fixed-size forest, a third of the columns tried at each split."""

    name = "forest"

    def __init__(self, *, n_estimators: int = config.FOREST_N_ESTIMATORS, **kwargs):
        super().__init__(**kwargs)
        self.n_estimators = n_estimators

    @staticmethod
    def max_features_for(n_columns: int) -> int:
        return max(1, int(round(n_columns / 3)))

    def build_estimator(self, X: NDArray) -> RandomForestRegressor:
        return RandomForestRegressor(
            n_estimators=self.n_estimators,
            max_features=self.max_features_for(X.shape[1]),
            random_state=self.random_state,
            n_jobs=1,
        )
