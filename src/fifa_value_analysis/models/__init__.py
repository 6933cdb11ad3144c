"""Model adapters for FIFA player value regression."""

from typing import List, Optional

from ..config import Config, config as default_config
from .base import FittedModel, MeanBaselineAdapter, ModelAdapter
from .kernel_smoothing import KernelSmoothingAdapter, NadarayaWatsonRegressor
from .linear_models import LassoAdapter, LinearAdapter, RidgeAdapter
from .neighbors import KNNAdapter
from .tree_models import DecisionTreeAdapter, RandomForestAdapter


def default_adapters(cfg: Optional[Config] = None) -> List[ModelAdapter]:
    """The compared model families in reporting order, configured from ``cfg``."""
    cfg = cfg or default_config
    common = dict(
        random_state=cfg.RANDOM_STATE,
        selection_scope=cfg.SELECTION_SCOPE,
        inner_cv_folds=cfg.INNER_CV_FOLDS,
    )
    return [
        LinearAdapter(**common),
        RidgeAdapter(penalty_grid=cfg.PENALTY_GRID, **common),
        LassoAdapter(penalty_grid=cfg.PENALTY_GRID, **common),
        KNNAdapter(k_grid=cfg.KNN_GRID, **common),
        KernelSmoothingAdapter(
            bandwidth_grid=cfg.BANDWIDTH_GRID,
            variance_target=cfg.PCA_VARIANCE_TARGET,
            **common,
        ),
        DecisionTreeAdapter(
            min_samples_split=cfg.TREE_MIN_SAMPLES_SPLIT,
            min_samples_leaf=cfg.TREE_MIN_SAMPLES_LEAF,
            max_candidates=cfg.TREE_MAX_CANDIDATES,
            **common,
        ),
        RandomForestAdapter(n_estimators=cfg.FOREST_N_ESTIMATORS, **common),
    ]


__all__ = [
    'ModelAdapter', 'FittedModel', 'MeanBaselineAdapter',
    'LinearAdapter', 'RidgeAdapter', 'LassoAdapter', 'KNNAdapter',
    'KernelSmoothingAdapter', 'NadarayaWatsonRegressor',
    'DecisionTreeAdapter', 'RandomForestAdapter', 'default_adapters',
]
