"""
MLflow logging of one cross-validated model comparison.

Only parameters, metrics and result tables are logged; fitted models are
never persisted.
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, Optional

import mlflow
import pandas as pd

from .experiment_utils import setup_mlflow_experiment

logger = logging.getLogger(__name__)


def _records(df: pd.DataFrame) -> list:
    """JSON-safe list of row dicts (numpy scalars converted)."""
    return json.loads(df.to_json(orient="records"))


def flatten_metrics(metrics: pd.DataFrame) -> Dict[str, float]:
    """``{model}_{metric}`` → value, skipping non-finite entries."""
    flat: Dict[str, float] = {}
    for model, row in metrics.iterrows():
        for metric, value in row.items():
            if value is not None and math.isfinite(float(value)):
                flat[f"{model}_{metric}"] = float(value)
    return flat


def log_parameters(params: Dict[str, Any]) -> None:
    """
    Log parameters to MLflow.

    Args:
        params: Dictionary of parameter names and values
    """
    mlflow.log_params({k: str(v) if isinstance(v, (list, tuple, dict)) else v
                       for k, v in params.items()})


def log_evaluation(
    result,
    params: Optional[Dict[str, Any]] = None,
    *,
    experiment_name: Optional[str] = None,
    tracking_uri: Optional[str] = None,
    run_name: str = "model_comparison",
) -> str:
    """
    Log an ``EvaluationResult`` as a single MLflow run and return its run id.

    Logged:
    • params          - run settings plus selected global hyper-parameters
    • metrics         - {model}_{mse,rmse,mae,mape,r2} and best_mse
    • artifacts       - metrics.json, outliers.json, failures.json
    """
    setup_mlflow_experiment(experiment_name, tracking_uri)

    with mlflow.start_run(run_name=run_name) as run:
        all_params = dict(params or {})
        for model, chosen in result.selected_params.items():
            for key, value in chosen["global"].items():
                all_params[f"{model}.{key.split('__')[-1]}"] = value
        if all_params:
            log_parameters(all_params)

        metrics = flatten_metrics(result.metrics)
        if not result.metrics.empty:
            metrics["best_mse"] = float(result.metrics["mse"].min())
        if metrics:
            mlflow.log_metrics(metrics)

        mlflow.log_dict(_records(result.metrics.reset_index()), "metrics.json")
        mlflow.log_dict(
            {model: _records(table) for model, table in result.outliers.items()},
            "outliers.json",
        )
        mlflow.log_dict({model: str(exc) for model, exc in result.failures.items()}, "failures.json")

        logger.info("Logged evaluation to MLflow run %s", run.info.run_id)
        return run.info.run_id
