"""
Configuration module for the FIFA player value analysis package.
Contains all constants, paths, vocabularies and model grids.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np


class Config:
    """Main configuration class for the FIFA value analysis package."""
    MLFLOW_EXPERIMENT_NAME = "fifa_value_analysis"

    # Project root is three levels above this file (src/fifa_value_analysis/config.py)
    _CONFIG_DIR = Path(__file__).parent.parent.parent
    PROJECT_ROOT = _CONFIG_DIR.resolve()

    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw"
    OUTPUT_DIR = PROJECT_ROOT / "output"

    # Raw data files
    PLAYERS_FILE = RAW_DATA_DIR / "players.csv"
    LEAGUES_FILE = RAW_DATA_DIR / "leagues.csv"

    # Output tables
    METRICS_FILE = OUTPUT_DIR / "model_comparison.csv"
    OUTLIERS_FILE = OUTPUT_DIR / "outliers.csv"

    # ─── Field parsing ──────────────────────────────────────────
    CURRENCY_SYMBOL = "€"
    MILLION_SUFFIX = "M"
    THOUSAND_SUFFIX = "K"
    HEIGHT_DELIMITER = "'"
    WEIGHT_SUFFIX = "lbs"
    POUNDS_TO_KG = 0.45359237
    INCH_TO_CM = 2.54
    REFERENCE_YEAR = 2018

    # ─── Categorical vocabularies ───────────────────────────────
    FIELD_POSITIONS: Dict[str, Tuple[str, ...]] = {
        "Goalkeeper": ("GK",),
        "Defender": ("CB", "LCB", "RCB", "LB", "RB", "LWB", "RWB"),
        "Midfielder": ("CDM", "LDM", "RDM", "CM", "LCM", "RCM",
                       "CAM", "LAM", "RAM", "LM", "RM"),
        "Attack": ("ST", "LS", "RS", "CF", "LCF", "RCF", "LW", "RW"),
    }
    ORDINAL_TIERS: Tuple[int, ...] = (1, 2, 3, 4, 5)
    WORK_RATE_TIERS: Tuple[str, ...] = ("Low", "Medium", "High")
    PREFERRED_FOOT: Tuple[str, ...] = ("Left", "Right")

    # ─── League bucketing ───────────────────────────────────────
    TOP_LEAGUES = 6
    OTHER_LEAGUE = "Other"
    # Leagues whose club roster in the lookup is known to be incomplete
    EXCLUDED_LEAGUES: Tuple[str, ...] = ("Rest of World", "Free Agents")

    # ─── Evaluation ─────────────────────────────────────────────
    N_FOLDS = 20
    RANDOM_STATE = 42
    INNER_CV_FOLDS = 10
    # "global": hyper-parameters chosen once on the whole dataset
    # "nested": chosen from each outer fold's training rows only
    SELECTION_SCOPE = "global"
    N_JOBS = 1
    OUTLIER_COUNT = 10

    # ─── Model grids ────────────────────────────────────────────
    PENALTY_GRID = np.logspace(-3, 2, 30)
    KNN_GRID: Tuple[int, ...] = (1, 3, 5, 7, 9, 11, 15, 21)
    BANDWIDTH_GRID = np.linspace(0.05, 2.0, 40)
    PCA_VARIANCE_TARGET = 0.90
    TREE_MIN_SAMPLES_SPLIT = 20
    TREE_MIN_SAMPLES_LEAF = 7
    TREE_MAX_CANDIDATES = 40
    FOREST_N_ESTIMATORS = 500

    @classmethod
    def ensure_directories(cls):
        """Create all required directories if they don't exist."""
        for dir_path in [cls.RAW_DATA_DIR, cls.OUTPUT_DIR]:
            dir_path.mkdir(parents=True, exist_ok=True)

    def update(self, **overrides: Any) -> "Config":
        """
        Return a copy of this config with the given attributes replaced.

        Keys are attribute names, case-insensitive (``n_folds=5`` sets
        ``N_FOLDS``). Unknown keys raise ``AttributeError`` so typos do not
        silently fall back to defaults.
        """
        updated = copy.copy(self)
        for key, value in overrides.items():
            name = key.upper()
            if not hasattr(self, name):
                raise AttributeError(f"Unknown config attribute: {key}")
            setattr(updated, name, value)
        return updated

    def as_params(self) -> Dict[str, Any]:
        """Flat, loggable view of the evaluation settings."""
        return {
            "n_folds": self.N_FOLDS,
            "random_state": self.RANDOM_STATE,
            "inner_cv_folds": self.INNER_CV_FOLDS,
            "selection_scope": self.SELECTION_SCOPE,
            "top_leagues": self.TOP_LEAGUES,
            "reference_year": self.REFERENCE_YEAR,
            "forest_n_estimators": self.FOREST_N_ESTIMATORS,
            "n_jobs": self.N_JOBS,
        }


def configure_logging(level: int = logging.INFO) -> None:
    """Install the package-wide log format on the root logger."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Create global config instance
config = Config()

# ───────────────────────── Feature catalogue ─────────────────────────
# Single source of truth for column roles
FEATURE_LISTS: Dict[str, List[str]] = {
    "numerical": [
        "age", "overall", "potential", "special",
        "wage", "release_clause", "height_cm", "weight_kg",
        "contract_years",
    ],
    "ordinal": [
        "international_reputation", "weak_foot", "skill_moves",
        "work_rate_offense", "work_rate_defense",
    ],
    "nominal": ["field_position", "preferred_foot", "league"],
    "identity": ["name", "nationality", "club", "position"],
    "y_variable": ["value"],
}

config.FEATURE_LISTS = FEATURE_LISTS
