"""
Univariate kernel smoothing on the first principal component of the design.

The design matrix is centred (not scaled) and projected on its first
principal component, which is then standardised so that the bandwidth grid
is expressed in standard deviations of that component. Smoothing uses a
Gaussian kernel whose quartiles sit at ±bandwidth/4, matching the usual
"normal" kernel parametrisation of a smoothing window.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.stats import norm
from sklearn.base import BaseEstimator, RegressorMixin, TransformerMixin
from sklearn.decomposition import PCA
from sklearn.model_selection import cross_val_predict
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.utils.validation import check_is_fitted

from fifa_value_analysis.config import config
from fifa_value_analysis.exceptions import ModelFitError
from fifa_value_analysis.models.base import ModelAdapter

if TYPE_CHECKING:
    from fifa_value_analysis.evaluation.folds import FoldPartition

logger = logging.getLogger(__name__)

# kernel standard deviation per unit of bandwidth
_BANDWIDTH_TO_SD = 0.25 / norm.ppf(0.75)


class NadarayaWatsonRegressor(RegressorMixin, BaseEstimator):
    """Gaussian-kernel weighted average of training targets along one axis."""

    def __init__(self, bandwidth: float = 0.5, chunk_size: int = 1024):
        self.bandwidth = bandwidth
        self.chunk_size = chunk_size

    def fit(self, X, y):
        z = np.asarray(X, dtype=float).reshape(len(X), -1)
        if z.shape[1] != 1:
            raise ValueError(f"kernel smoothing expects one feature, got {z.shape[1]}")
        if self.bandwidth <= 0:
            raise ValueError(f"bandwidth must be positive, got {self.bandwidth}")
        self.z_ = z[:, 0]
        self.y_ = np.asarray(y, dtype=float)
        return self

    def predict(self, X):
        check_is_fitted(self, ["z_", "y_"])
        z = np.asarray(X, dtype=float).reshape(len(X), -1)[:, 0]
        sd = self.bandwidth * _BANDWIDTH_TO_SD
        out = np.empty(len(z))
        for start in range(0, len(z), self.chunk_size):
            block = z[start:start + self.chunk_size]
            log_w = -0.5 * ((block[:, None] - self.z_[None, :]) / sd) ** 2
            # shift by the row maximum so the nearest point always keeps weight 1
            w = np.exp(log_w - log_w.max(axis=1, keepdims=True))
            out[start:start + len(block)] = w @ self.y_ / w.sum(axis=1)
        return out


def principal_axis(random_state: Optional[int] = None) -> Pipeline:
    """Centre → first principal component → unit variance."""
    return Pipeline([
        ("pca", PCA(n_components=1, random_state=random_state)),
        ("scale", StandardScaler()),
    ])


class _FrozenProjection(TransformerMixin, BaseEstimator):
    """A fitted principal axis held as plain arrays; fitting is a no-op."""

    def __init__(self, center=None, axis=None, offset=0.0, scale=1.0):
        self.center = center
        self.axis = axis
        self.offset = offset
        self.scale = scale

    @classmethod
    def from_pipeline(cls, projection: Pipeline) -> "_FrozenProjection":
        pca = projection.named_steps["pca"]
        scaler = projection.named_steps["scale"]
        return cls(
            center=pca.mean_.copy(),
            axis=pca.components_[0].copy(),
            offset=float(scaler.mean_[0]),
            scale=float(scaler.scale_[0]),
        )

    def fit(self, X, y=None):
        return self

    def transform(self, X):
        z = (np.asarray(X, dtype=float) - self.center) @ self.axis
        return ((z - self.offset) / self.scale).reshape(-1, 1)


class KernelSmoothingAdapter(ModelAdapter):
    """
    Kernel smoothing of the target against the first principal component.

    The bandwidth is scored by the MSE of the pooled validation predictions
    (every row predicted once), not by the mean of per-split MSEs.
    """

    name = "kernel"

    def __init__(
        self,
        *,
        bandwidth_grid: Optional[Sequence[float]] = None,
        variance_target: float = config.PCA_VARIANCE_TARGET,
        **kwargs,
    ):
        super().__init__(**kwargs)
        grid = config.BANDWIDTH_GRID if bandwidth_grid is None else bandwidth_grid
        self.bandwidth_grid = [float(b) for b in grid]
        self.variance_target = variance_target
        self.projection_: Optional[Pipeline] = None
        self.bandwidth_scores_: Dict[float, float] = {}

    def _fit_projection(self, X: NDArray, fold: Optional[int]) -> Pipeline:
        projection = principal_axis(self.random_state).fit(X)
        explained = float(projection.named_steps["pca"].explained_variance_ratio_[0])
        where = "full dataset" if fold is None else f"fold {fold}"
        if explained < self.variance_target:
            logger.warning(
                "First principal component explains %.1f%% of variance on %s (target %.0f%%)",
                100 * explained, where, 100 * self.variance_target,
            )
        else:
            logger.info("First principal component explains %.1f%% of variance on %s",
                        100 * explained, where)
        return projection

    def build_estimator(self, X: NDArray) -> Pipeline:
        if self.selection_scope == "global":
            if self.projection_ is None:
                raise ModelFitError(self.name, None, "prepare() must run before fit()")
            project = _FrozenProjection.from_pipeline(self.projection_)
        else:
            project = principal_axis(self.random_state)
        return Pipeline([
            ("project", project),
            ("smooth", NadarayaWatsonRegressor()),
        ])

    def param_grid(self, X: NDArray, y: NDArray) -> Dict[str, List[Any]]:
        return {"smooth__bandwidth": list(self.bandwidth_grid)}

    def select(
        self,
        X: NDArray,
        y: NDArray,
        fold: Optional[int] = None,
        partition: Optional[FoldPartition] = None,
    ) -> Dict[str, Any]:
        """Pick the bandwidth with the lowest pooled out-of-fold MSE."""
        if not self.bandwidth_grid:
            raise ModelFitError(self.name, fold, "empty bandwidth grid")
        cv = self.selection_cv(len(y), partition, fold)

        scores: Dict[float, float] = {}
        for bandwidth in self.bandwidth_grid:
            estimator = self.build_estimator(X).set_params(smooth__bandwidth=bandwidth)
            pooled = cross_val_predict(estimator, X, y, cv=cv)
            scores[bandwidth] = float(np.mean((np.asarray(y, dtype=float) - pooled) ** 2))

        best = min(scores, key=scores.get)
        self.bandwidth_scores_ = scores
        logger.debug("kernel fold %s: bandwidth=%.3f pooled MSE=%.4f", fold, best, scores[best])
        return {"smooth__bandwidth": best}

    def selection_cv(self, n_rows: int, partition: Optional[FoldPartition], fold: Optional[int] = None) -> Any:
        # global scope scans bandwidths against the outer folds themselves
        if partition is not None:
            return list(partition.split())
        return super().selection_cv(n_rows, partition, fold)

    def prepare(self, X: NDArray, y: NDArray, partition: Optional[FoldPartition] = None) -> None:
        self.projection_ = None
        self.bandwidth_scores_ = {}
        if self.selection_scope == "global":
            self.projection_ = self._fit_projection(X, None)
        super().prepare(X, y, partition)
