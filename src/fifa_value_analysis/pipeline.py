"""
End-to-end run: design matrix → fold partition → model comparison.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import pandas as pd

from fifa_value_analysis.config import Config, config
from fifa_value_analysis.data.leagues import LeagueAggregator
from fifa_value_analysis.data.preprocessor import DataPreprocessor, DesignMatrix
from fifa_value_analysis.evaluation.folds import FoldPartition, make_folds
from fifa_value_analysis.evaluation.harness import EvaluationHarness, EvaluationResult
from fifa_value_analysis.models import ModelAdapter, default_adapters

logger = logging.getLogger(__name__)


def build_design(players: pd.DataFrame, lookup: pd.DataFrame, cfg: Config = config) -> DesignMatrix:
    """Assemble the design matrix with league settings taken from ``cfg``."""
    aggregator = LeagueAggregator(
        top_n=cfg.TOP_LEAGUES,
        excluded_leagues=cfg.EXCLUDED_LEAGUES,
        other_label=cfg.OTHER_LEAGUE,
    )
    return DataPreprocessor(aggregator).build(players, lookup)


def run_analysis(
    players: pd.DataFrame,
    lookup: pd.DataFrame,
    cfg: Config = config,
    adapters: Optional[Sequence[ModelAdapter]] = None,
    track: bool = False,
) -> Tuple[DesignMatrix, FoldPartition, EvaluationResult]:
    """
    Run the whole comparison once.

    Args:
        players: raw player table (snake_case columns)
        lookup: club → league table
        cfg: configuration; use ``config.update(...)`` to override seeds or folds
        adapters: model families to compare (defaults to the seven standard ones)
        track: log the run to MLflow

    Returns:
        (design matrix, fold partition, evaluation result)
    """
    design = build_design(players, lookup, cfg)
    partition = make_folds(design.n_rows, cfg.N_FOLDS, seed=cfg.RANDOM_STATE)

    harness = EvaluationHarness(
        adapters if adapters is not None else default_adapters(cfg),
        n_jobs=cfg.N_JOBS,
        outlier_count=cfg.OUTLIER_COUNT,
    )
    result = harness.run(design, partition)
    if result.failures:
        logger.warning("Models without results: %s", sorted(result.failures))

    if track:
        from mlops.tracking import log_evaluation

        params = dict(cfg.as_params(), n_rows=design.n_rows, n_features=design.X.shape[1])
        log_evaluation(result, params, experiment_name=cfg.MLFLOW_EXPERIMENT_NAME)

    return design, partition, result
