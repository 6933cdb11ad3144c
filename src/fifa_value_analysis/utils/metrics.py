"""
Metrics utilities for FIFA player value regression.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.metrics import (
    mean_absolute_error,
    mean_absolute_percentage_error,
    mean_squared_error,
    r2_score,
)


class RegressionEvaluator:
    """Out-of-fold error metrics and residual diagnostics."""

    # ---------- single-metric helpers ----------
    @staticmethod
    def mse(y, p) -> float:
        return float(mean_squared_error(y, p))

    @staticmethod
    def mape(y, p) -> float:
        """Mean absolute percentage error as a fraction (0.25 = 25 %)."""
        return float(mean_absolute_percentage_error(y, p))

    @staticmethod
    def mae(y, p) -> float:
        return float(mean_absolute_error(y, p))

    @staticmethod
    def r2(y, p) -> float:
        return float(r2_score(y, p))

    # ---------- public aggregator ----------
    def calculate_regression_metrics(self, y_true, y_pred) -> Dict[str, float]:
        """Return a full metric dictionary."""
        y_true = np.asarray(y_true, dtype=float)
        y_pred = np.asarray(y_pred, dtype=float)
        if y_true.shape != y_pred.shape:
            raise ValueError(f"shape mismatch: {y_true.shape} vs {y_pred.shape}")
        mse = self.mse(y_true, y_pred)
        return {
            "mse":  mse,
            "rmse": float(np.sqrt(mse)),
            "mae":  self.mae(y_true, y_pred),
            "mape": self.mape(y_true, y_pred),
            "r2":   self.r2(y_true, y_pred) if len(y_true) > 1 else np.nan,
        }

    # ---------- comparison helper ----------
    def compare_models(self, results: Dict[str, Dict[str, float]]) -> pd.DataFrame:
        """
        Turn {model: metric_dict} into a tidy table ordered by MSE.
        """
        desired_cols: List[str] = ["mse", "rmse", "mae", "mape", "r2"]
        if not results:
            return pd.DataFrame(columns=desired_cols).rename_axis("model")
        df = pd.DataFrame(results).T  # one row per model
        for c in desired_cols:
            if c not in df.columns:
                df[c] = np.nan
        return df[desired_cols].astype(float).sort_values("mse").rename_axis("model")

    # ---------- residual diagnostics ----------
    @staticmethod
    def top_residuals(
        y_true,
        y_pred,
        identity: Optional[pd.DataFrame] = None,
        n: int = 10,
    ) -> pd.DataFrame:
        """
        The ``n`` rows with the largest absolute residual (actual − predicted),
        joined to their identity columns when given.
        """
        y_true = np.asarray(y_true, dtype=float)
        y_pred = np.asarray(y_pred, dtype=float)
        residual = y_true - y_pred
        order = np.argsort(-np.abs(residual), kind="stable")[:n]

        table = pd.DataFrame({
            "row": order,
            "actual": y_true[order],
            "predicted": y_pred[order],
            "residual": residual[order],
            "abs_residual": np.abs(residual[order]),
        })
        if identity is not None:
            ident = identity.iloc[order].reset_index(drop=True)
            table = pd.concat([table, ident], axis=1)
        table.insert(0, "rank", np.arange(1, len(table) + 1))
        return table
