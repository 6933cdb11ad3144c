"""
Feature assembly for FIFA player value modelling.
Chains parsing, categorical normalisation and league bucketing, drops
incomplete rows and encodes the final design matrix.

Every stage takes the previous stage's frame and returns a new one; nothing
is modified in place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder, OrdinalEncoder

from fifa_value_analysis.config import FEATURE_LISTS, config
from fifa_value_analysis.data.categories import normalize_categories
from fifa_value_analysis.data.feature_schema import FeatureSchema
from fifa_value_analysis.data.leagues import LeagueAggregator, LeagueBucketing
from fifa_value_analysis.data.parsing import parse_numeric_columns, parse_player_fields

logger = logging.getLogger(__name__)

# Numerical features produced by parse_player_fields rather than read as-is
PARSED_NUMERICAL = {"wage", "release_clause", "height_cm", "weight_kg", "contract_years"}


@dataclass(frozen=True)
class DesignMatrix:
    """Encoded features, target and the identity side-table, row-aligned."""
    X: pd.DataFrame
    y: pd.Series
    identity: pd.DataFrame
    schema: FeatureSchema
    bucketing: LeagueBucketing
    dropped: Dict[str, int] = field(default_factory=dict)

    @property
    def n_rows(self) -> int:
        return len(self.y)

    @property
    def feature_names(self) -> List[str]:
        return list(self.X.columns)


class DataPreprocessor:
    """Builds the modelling design matrix from raw player and league tables."""

    def __init__(self, aggregator: Optional[LeagueAggregator] = None):
        """Create a preprocessor with defaults from central config."""
        self.NUMERICAL_FEATURES: List[str] = []
        self.ORDINAL_FEATURES: List[str] = []
        self.NOMINAL_FEATURES: List[str] = []
        self.IDENTITY_COLUMNS: List[str] = []
        self.TARGET: str = "value"

        self.aggregator = aggregator or LeagueAggregator()
        self.column_transformer_: ColumnTransformer | None = None

        self.update_feature_lists(
            numerical=FEATURE_LISTS["numerical"],
            ordinal=FEATURE_LISTS["ordinal"],
            nominal=FEATURE_LISTS["nominal"],
            identity=FEATURE_LISTS["identity"],
            y_variable=FEATURE_LISTS["y_variable"],
        )

    def update_feature_lists(self,
                             numerical: Optional[List[str]] = None,
                             ordinal: Optional[List[str]] = None,
                             nominal: Optional[List[str]] = None,
                             identity: Optional[List[str]] = None,
                             y_variable: Optional[List[str]] = None):
        """
        Update feature lists for easy experimentation.

        Args:
            numerical: List of numerical features to use
            ordinal: List of ordered categorical features to use
            nominal: List of nominal categorical features to use
            identity: Display-only columns kept in the identity side-table
            y_variable: List containing target variable name
        """
        if numerical is not None:
            self.NUMERICAL_FEATURES = list(numerical)
        if ordinal is not None:
            self.ORDINAL_FEATURES = list(ordinal)
        if nominal is not None:
            self.NOMINAL_FEATURES = list(nominal)
        if identity is not None:
            self.IDENTITY_COLUMNS = list(identity)
        if y_variable is not None:
            self.TARGET = y_variable[0]  # Single target assumed

    @property
    def schema(self) -> FeatureSchema:
        return FeatureSchema(
            numerical=list(self.NUMERICAL_FEATURES),
            ordinal=list(self.ORDINAL_FEATURES),
            nominal=list(self.NOMINAL_FEATURES),
            identity=list(self.IDENTITY_COLUMNS),
            target=self.TARGET,
        )

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def clean_records(self, players: pd.DataFrame) -> pd.DataFrame:
        """Parse units, coerce plain numerics and normalise categories."""
        raw_numeric = [
            c for c in self.NUMERICAL_FEATURES
            if c not in PARSED_NUMERICAL and c in players.columns
        ]
        parsed = parse_player_fields(players)
        parsed = parse_numeric_columns(parsed, raw_numeric)
        return normalize_categories(parsed)

    def drop_incomplete(self, df: pd.DataFrame) -> tuple[pd.DataFrame, Dict[str, int]]:
        """
        Drop rows missing any required field; never impute.

        Returns the kept rows (re-indexed 0..n-1, with the original label in
        ``source_row``) and the number of rows missing each required column.
        """
        required = self.schema.required
        missing = df[required].isna()
        dropped = {col: int(n) for col, n in missing.sum().items() if n}
        keep = ~missing.any(axis=1)

        kept = df[keep].copy()
        kept.insert(0, "source_row", kept.index)
        kept = kept.reset_index(drop=True)

        logger.info(
            "Dropped %d of %d players with missing required fields %s",
            int((~keep).sum()), len(df), dropped,
        )
        return kept, dropped

    def _category_lists(self, bucketing: LeagueBucketing) -> Dict[str, List[str]]:
        """Fixed vocabulary for every categorical feature, as strings."""
        vocab: Dict[str, List[str]] = {
            "international_reputation": [str(t) for t in config.ORDINAL_TIERS],
            "weak_foot": [str(t) for t in config.ORDINAL_TIERS],
            "skill_moves": [str(t) for t in config.ORDINAL_TIERS],
            "work_rate_offense": list(config.WORK_RATE_TIERS),
            "work_rate_defense": list(config.WORK_RATE_TIERS),
            "field_position": list(config.FIELD_POSITIONS.keys()),
            "preferred_foot": list(config.PREFERRED_FOOT),
            "league": list(bucketing.categories),
        }
        return {c: vocab[c] for c in self.ORDINAL_FEATURES + self.NOMINAL_FEATURES}

    def encode(self, df: pd.DataFrame, bucketing: LeagueBucketing) -> pd.DataFrame:
        """
        Encode the kept rows into a float design matrix.

        • numerical - passed through
        • ordinal   - integer rank along the fixed tier order
        • nominal   - one-hot over the levels present, first level dropped so
                      OLS stays full rank
        """
        vocab = self._category_lists(bucketing)
        categorical = self.ORDINAL_FEATURES + self.NOMINAL_FEATURES
        frame = df[self.NUMERICAL_FEATURES + categorical].copy()
        for col in categorical:
            frame[col] = frame[col].astype(str)
        # levels without rows would give all-zero dummy columns
        for col in self.NOMINAL_FEATURES:
            present = set(frame[col])
            unused = [level for level in vocab[col] if level not in present]
            if unused:
                logger.info("No rows for %s levels %s; not encoded", col, unused)
            vocab[col] = [level for level in vocab[col] if level in present]

        transformer = ColumnTransformer(
            [
                ("num", "passthrough", self.NUMERICAL_FEATURES),
                ("ord", OrdinalEncoder(categories=[vocab[c] for c in self.ORDINAL_FEATURES]),
                 self.ORDINAL_FEATURES),
                ("nom", OneHotEncoder(categories=[vocab[c] for c in self.NOMINAL_FEATURES],
                                      drop="first", sparse_output=False),
                 self.NOMINAL_FEATURES),
            ],
            verbose_feature_names_out=False,
        )
        matrix = transformer.fit_transform(frame)
        self.column_transformer_ = transformer
        return pd.DataFrame(
            np.asarray(matrix, dtype=float),
            columns=list(transformer.get_feature_names_out()),
            index=df.index,
        )

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------
    def build(self, players: pd.DataFrame, lookup: pd.DataFrame) -> DesignMatrix:
        """Run every stage and return the frozen design matrix."""
        cleaned = self.clean_records(players)
        bucketing = self.aggregator.bucket(cleaned, lookup)
        self.schema.assert_in_dataframe(bucketing.records)
        kept, dropped = self.drop_incomplete(bucketing.records)

        identity_cols = ["source_row"] + [c for c in self.IDENTITY_COLUMNS if c in kept.columns]
        design = DesignMatrix(
            X=self.encode(kept, bucketing),
            y=kept[self.TARGET].astype(float).rename(self.TARGET),
            identity=kept[identity_cols].copy(),
            schema=self.schema,
            bucketing=bucketing,
            dropped=dropped,
        )
        logger.info("Design matrix: %d rows × %d features", design.n_rows, design.X.shape[1])
        return design
