"""
Cross-validated comparison of model families on a shared fold partition.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from numpy.typing import NDArray

from fifa_value_analysis.config import config
from fifa_value_analysis.data.preprocessor import DesignMatrix
from fifa_value_analysis.evaluation.folds import FoldPartition
from fifa_value_analysis.exceptions import DegenerateFoldError, ModelFitError
from fifa_value_analysis.models.base import ModelAdapter, adapter_names
from fifa_value_analysis.utils.metrics import RegressionEvaluator

logger = logging.getLogger(__name__)

CellResult = Tuple[int, NDArray[np.int_], NDArray[np.float64], Dict[str, Any]]


@dataclass(frozen=True)
class ModelRun:
    """Out-of-fold predictions and chosen hyper-parameters of one model family."""
    name: str
    predictions: NDArray[np.float64]
    global_params: Dict[str, Any]
    fold_params: Dict[int, Dict[str, Any]]


@dataclass(frozen=True)
class EvaluationResult:
    """Everything the harness hands to reporting code."""
    partition: FoldPartition
    predictions: pd.DataFrame               # one column per model
    metrics: pd.DataFrame                   # one row per model, sorted by MSE
    outliers: Dict[str, pd.DataFrame]       # model → top residual rows
    outlier_overlap: pd.DataFrame           # rows flagged by several models
    selected_params: Dict[str, Dict[str, Any]]
    failures: Dict[str, ModelFitError] = field(default_factory=dict)

    @property
    def models(self) -> List[str]:
        return list(self.predictions.columns)


def _run_cell(
    adapter: ModelAdapter,
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    train_idx: NDArray[np.int_],
    test_idx: NDArray[np.int_],
    fold: int,
) -> CellResult:
    """Fit on the training rows only and predict the held-out fold."""
    if len(test_idx) == 0:
        raise DegenerateFoldError(adapter.name, fold, 0, 1)
    state = adapter.fit(X[train_idx], y[train_idx], fold)
    predictions = adapter.predict(state, X[test_idx], fold)
    return fold, test_idx, predictions, dict(state.params)


class EvaluationHarness:
    """Runs every (model, fold) cell and assembles out-of-fold predictions."""

    def __init__(
        self,
        adapters: Sequence[ModelAdapter],
        *,
        n_jobs: int = config.N_JOBS,
        outlier_count: int = config.OUTLIER_COUNT,
    ):
        adapter_names(adapters)
        self.adapters = list(adapters)
        self.n_jobs = n_jobs
        self.outlier_count = outlier_count
        self.evaluator = RegressionEvaluator()

    def evaluate_model(
        self,
        adapter: ModelAdapter,
        X: NDArray[np.float64],
        y: NDArray[np.float64],
        partition: FoldPartition,
    ) -> ModelRun:
        """
        Out-of-fold predictions for one model family.

        Each fold writes only its own rows; every row must be written exactly
        once before the vector is returned.
        """
        adapter.prepare(X, y, partition)

        cells: List[CellResult] = Parallel(n_jobs=self.n_jobs)(
            delayed(_run_cell)(adapter, X, y, train_idx, test_idx, fold)
            for fold, (train_idx, test_idx) in enumerate(partition.split())
        )

        predictions = np.full(len(y), np.nan)
        writes = np.zeros(len(y), dtype=int)
        fold_params: Dict[int, Dict[str, Any]] = {}
        for fold, test_idx, fold_pred, params in cells:
            predictions[test_idx] = fold_pred
            writes[test_idx] += 1
            fold_params[fold] = params

        if not np.all(writes == 1):
            bad = np.flatnonzero(writes != 1)
            raise RuntimeError(f"{adapter.name}: rows {bad[:10].tolist()} written {writes[bad[:10]].tolist()} times")

        return ModelRun(
            name=adapter.name,
            predictions=predictions,
            global_params=dict(adapter.selected_params_),
            fold_params=fold_params,
        )

    def run_arrays(
        self,
        X,
        y,
        partition: FoldPartition,
        identity: Optional[pd.DataFrame] = None,
    ) -> EvaluationResult:
        """Evaluate every adapter on plain arrays; failures are isolated per model."""
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=float)
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if not (len(X) == len(y) == partition.n_rows):
            raise ValueError(
                f"row counts disagree: X={len(X)}, y={len(y)}, partition={partition.n_rows}"
            )

        runs: Dict[str, ModelRun] = {}
        failures: Dict[str, ModelFitError] = {}
        for adapter in self.adapters:
            logger.info("Evaluating %s over %d folds", adapter.name, partition.n_folds)
            try:
                runs[adapter.name] = self.evaluate_model(adapter, X, y, partition)
            except ModelFitError as exc:
                logger.warning("Skipping %s: %s", adapter.name, exc)
                failures[adapter.name] = exc

        return self._summarise(runs, failures, y, partition, identity)

    def run(self, design: DesignMatrix, partition: FoldPartition) -> EvaluationResult:
        """Evaluate every adapter on the assembled design matrix."""
        return self.run_arrays(design.X.to_numpy(), design.y.to_numpy(), partition, design.identity)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def _summarise(
        self,
        runs: Dict[str, ModelRun],
        failures: Dict[str, ModelFitError],
        y: NDArray[np.float64],
        partition: FoldPartition,
        identity: Optional[pd.DataFrame],
    ) -> EvaluationResult:
        predictions = pd.DataFrame({name: run.predictions for name, run in runs.items()})

        scores: Dict[str, Dict[str, float]] = {}
        outliers: Dict[str, pd.DataFrame] = {}
        for name, run in runs.items():
            scores[name] = self.evaluator.calculate_regression_metrics(y, run.predictions)
            outliers[name] = self.evaluator.top_residuals(
                y, run.predictions, identity, n=self.outlier_count
            )
            logger.info("%s: MSE=%.4f MAPE=%.4f", name, scores[name]["mse"], scores[name]["mape"])

        return EvaluationResult(
            partition=partition,
            predictions=predictions,
            metrics=self.evaluator.compare_models(scores),
            outliers=outliers,
            outlier_overlap=outlier_overlap(outliers),
            selected_params={
                name: {"global": run.global_params, "folds": run.fold_params}
                for name, run in runs.items()
            },
            failures=failures,
        )


def outlier_overlap(outliers: Dict[str, pd.DataFrame]) -> pd.DataFrame:
    """Rows flagged as top residuals by more than one model, most shared first."""
    columns = ["row", "n_models", "models"]
    if not outliers:
        return pd.DataFrame(columns=columns)
    stacked = pd.concat(
        [table.assign(model=name) for name, table in outliers.items()],
        ignore_index=True,
    )
    overlap = (
        stacked.groupby("row")["model"]
        .agg(n_models="nunique", models=lambda m: ", ".join(sorted(set(m))))
        .reset_index()
    )
    overlap = overlap[overlap["n_models"] > 1]
    extra = [c for c in ("name", "club") if c in stacked.columns]
    if extra:
        names = stacked.drop_duplicates("row").set_index("row")[extra]
        overlap = overlap.join(names, on="row")
    return overlap.sort_values(["n_models", "row"], ascending=[False, True]).reset_index(drop=True)
