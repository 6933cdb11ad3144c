"""
Data loading module for FIFA player value analysis.
Reads the raw player table and the club → league lookup.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional

import pandas as pd

from fifa_value_analysis.config import config

logger = logging.getLogger(__name__)


def snake_case_columns(df: pd.DataFrame) -> pd.DataFrame:
    """``"Release Clause"`` → ``release_clause``; drops unnamed index columns."""
    df = df.loc[:, [c for c in df.columns if not str(c).startswith("Unnamed")]].copy()
    df.columns = [re.sub(r"\W+", "_", str(c).strip()).strip("_").lower() for c in df.columns]
    return df


class DataLoader:
    """Handles loading of the raw player and league tables."""

    def __init__(self):
        """Initialize the data loader."""
        self.players_df: Optional[pd.DataFrame] = None
        self.leagues_df: Optional[pd.DataFrame] = None

    @staticmethod
    def _read(filepath: Path, label: str) -> pd.DataFrame:
        try:
            df = pd.read_csv(filepath)
        except FileNotFoundError:
            raise FileNotFoundError(f"{label} data file not found: {filepath}") from None
        logger.info("Loaded %d %s rows from %s", len(df), label, filepath)
        return snake_case_columns(df)

    def load_players(self, filepath: Optional[Path] = None) -> pd.DataFrame:
        """
        Load the raw player table.

        Args:
            filepath: Optional path to the players CSV file

        Returns:
            DataFrame with snake_case column names, raw string fields untouched
        """
        self.players_df = self._read(Path(filepath or config.PLAYERS_FILE), "players")
        return self.players_df

    def load_league_lookup(self, filepath: Optional[Path] = None) -> pd.DataFrame:
        """
        Load the club → league lookup.

        Args:
            filepath: Optional path to the leagues CSV file

        Returns:
            DataFrame with at least ``club`` and ``league`` columns
        """
        self.leagues_df = self._read(Path(filepath or config.LEAGUES_FILE), "league lookup")
        return self.leagues_df

    def get_data_summary(self) -> dict:
        """
        Get summary statistics of loaded data.

        Returns:
            Dictionary with data summary information
        """
        if self.players_df is None:
            raise ValueError("No data loaded. Call load_players() first.")

        players = self.players_df
        summary = {
            'total_players': len(players),
            'unique_clubs': players['club'].nunique() if 'club' in players else 0,
            'loaned_players': int(players['loaned_from'].notna().sum()) if 'loaned_from' in players else 0,
            'missing_value': int(players['value'].isna().sum()) if 'value' in players else 0,
        }
        if self.leagues_df is not None:
            summary['lookup_clubs'] = self.leagues_df['club'].nunique()
            summary['lookup_leagues'] = self.leagues_df['league'].nunique()
        return summary
