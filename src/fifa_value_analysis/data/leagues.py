"""
League aggregation: join players to leagues through the club lookup and
collapse all but the highest-valued leagues into a single bucket.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

import numpy as np
import pandas as pd

from fifa_value_analysis.config import config
from fifa_value_analysis.exceptions import IncompleteLeagueDataError

logger = logging.getLogger(__name__)

REQUIRED_LOOKUP_COLS = ("club", "league")


@dataclass(frozen=True)
class LeagueBucketing:
    """Frozen outcome of one ranking pass."""
    records: pd.DataFrame
    ranking: pd.DataFrame                 # league, mean_value, n_players, rank
    top_leagues: Tuple[str, ...]
    club_map: Dict[str, str] = field(repr=False)
    other_label: str = config.OTHER_LEAGUE

    @property
    def categories(self) -> Tuple[str, ...]:
        """Vocabulary of the bucketed league column; "Other" only when a league was collapsed into it."""
        if len(self.ranking) > len(self.top_leagues):
            return self.top_leagues + (self.other_label,)
        return self.top_leagues

    def apply(self, records: pd.DataFrame) -> pd.DataFrame:
        """Re-apply this bucketing to ``records`` without re-ranking."""
        return _collapse(_join(records, self.club_map), self.top_leagues, self.other_label)


def _join(records: pd.DataFrame, club_map: Dict[str, str]) -> pd.DataFrame:
    df = records.drop(columns=["league"], errors="ignore").copy()
    df["league"] = df["club"].map(club_map)
    return df


def _collapse(joined: pd.DataFrame, top_leagues: Tuple[str, ...], other_label: str) -> pd.DataFrame:
    """Top leagues keep their name, any other resolved league becomes ``other_label``."""
    df = joined.copy()
    resolved = df["league"].notna()
    df.loc[resolved & ~df["league"].isin(top_leagues), "league"] = other_label
    return df


class LeagueAggregator:
    """Resolves league membership and buckets low-ranked leagues."""

    def __init__(
        self,
        *,
        top_n: int = config.TOP_LEAGUES,
        excluded_leagues: Iterable[str] = config.EXCLUDED_LEAGUES,
        other_label: str = config.OTHER_LEAGUE,
        target: str = "value",
    ):
        self.top_n = top_n
        self.excluded_leagues = tuple(excluded_leagues)
        self.other_label = other_label
        self.target = target

    def validate_lookup(self, lookup: pd.DataFrame) -> None:
        """Raise if the lookup cannot resolve clubs to exactly one league."""
        missing = [c for c in REQUIRED_LOOKUP_COLS if c not in lookup.columns]
        if missing:
            raise IncompleteLeagueDataError(f"league lookup missing columns: {missing}")

        null_leagues = lookup.loc[lookup["league"].isna(), "club"].tolist()
        if null_leagues:
            raise IncompleteLeagueDataError(f"clubs without a league: {null_leagues[:5]}")

        if "roster_complete" in lookup.columns:
            flags = lookup["roster_complete"]
            unknown = lookup.loc[~flags.map(lambda v: isinstance(v, (bool, np.bool_))), "club"].tolist()
            if unknown:
                raise IncompleteLeagueDataError(f"clubs without a boolean roster_complete flag: {unknown[:5]}")

        per_club = lookup.groupby("club")["league"].nunique()
        ambiguous = per_club[per_club > 1].index.tolist()
        if ambiguous:
            raise IncompleteLeagueDataError(f"clubs mapped to several leagues: {ambiguous[:5]}")

    def incomplete_leagues(self, lookup: pd.DataFrame) -> Tuple[str, ...]:
        """Fixed exclusions plus any league flagged with an incomplete roster."""
        excluded = set(self.excluded_leagues)
        if "roster_complete" in lookup.columns:
            flagged = lookup.loc[~lookup["roster_complete"].astype(bool), "league"]
            excluded.update(flagged.unique().tolist())
        return tuple(sorted(excluded))

    def club_map(self, lookup: pd.DataFrame) -> Dict[str, str]:
        """Club → league for every league with a complete roster."""
        self.validate_lookup(lookup)
        excluded = self.incomplete_leagues(lookup)
        kept = lookup[~lookup["league"].isin(excluded)]
        logger.info(
            "League lookup: %d clubs kept, %d leagues excluded %s",
            len(kept), len(excluded), list(excluded),
        )
        return dict(zip(kept["club"], kept["league"]))

    def rank_leagues(self, joined: pd.DataFrame) -> pd.DataFrame:
        """Rank leagues by mean target value, highest first (ties by name)."""
        resolved = joined[joined["league"].notna()]
        ranking = (
            resolved.groupby("league")[self.target]
            .agg(mean_value="mean", n_players="size")
            .reset_index()
            .sort_values(["mean_value", "league"], ascending=[False, True], na_position="last")
            .reset_index(drop=True)
        )
        ranking["rank"] = range(1, len(ranking) + 1)
        return ranking

    def bucket(self, records: pd.DataFrame, lookup: pd.DataFrame) -> LeagueBucketing:
        """
        Join ``records`` to their league and keep only the top-ranked names.

        Records whose club is not in the filtered lookup get a missing league;
        they are dropped later with the other incomplete rows. The ranking is
        computed here once and frozen in the returned ``LeagueBucketing``.
        """
        club_map = self.club_map(lookup)
        joined = _join(records, club_map)

        unresolved = int(joined["league"].isna().sum())
        if unresolved:
            logger.info("%d players have no resolved league", unresolved)

        ranking = self.rank_leagues(joined)
        top_leagues = tuple(ranking["league"].head(self.top_n))
        logger.info("Top %d leagues by mean value: %s", self.top_n, list(top_leagues))

        return LeagueBucketing(
            records=_collapse(joined, top_leagues, self.other_label),
            ranking=ranking,
            top_leagues=top_leagues,
            club_map=club_map,
            other_label=self.other_label,
        )
