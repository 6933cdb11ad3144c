"""
Categorical normalisation: closed vocabularies for position, foot,
work rates and 1-5 rating tiers.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Hashable, Sequence, Tuple

import numpy as np
import pandas as pd

from fifa_value_analysis.config import config
from fifa_value_analysis.data.parsing import is_missing
from fifa_value_analysis.exceptions import UnknownCategoryError

logger = logging.getLogger(__name__)

# position code → field position, inverted once from the config table
_POSITION_LOOKUP: Dict[str, str] = {
    code: bucket
    for bucket, codes in config.FIELD_POSITIONS.items()
    for code in codes
}

ORDINAL_FIELDS: Tuple[str, ...] = ("international_reputation", "weak_foot", "skill_moves")


def position_table() -> pd.DataFrame:
    """Return the code → field position membership table."""
    return (
        pd.DataFrame(sorted(_POSITION_LOOKUP.items()), columns=["position", "field_position"])
        .sort_values(["field_position", "position"])
        .reset_index(drop=True)
    )


def to_field_position(code: Any) -> Any:
    """Map a raw position code (``"LCB"``) to its field position bucket."""
    if is_missing(code):
        return np.nan
    bucket = _POSITION_LOOKUP.get(str(code).strip())
    if bucket is None:
        raise UnknownCategoryError("position", code)
    return bucket


def to_ordinal_tier(raw: Any, field: str) -> Any:
    """Validate a 1-5 rating tier, accepting ``3``, ``3.0`` and ``"3"``."""
    if is_missing(raw):
        return np.nan
    try:
        number = float(raw)
    except (TypeError, ValueError):
        raise UnknownCategoryError(field, raw) from None
    if not number.is_integer() or int(number) not in config.ORDINAL_TIERS:
        raise UnknownCategoryError(field, raw)
    return int(number)


def split_work_rate(raw: Any) -> Tuple[Any, Any]:
    """Split ``"High/ Low"`` into (offensive, defensive) tiers."""
    if is_missing(raw):
        return np.nan, np.nan
    parts = [part.strip() for part in str(raw).split("/")]
    if len(parts) != 2 or any(p not in config.WORK_RATE_TIERS for p in parts):
        raise UnknownCategoryError("work_rate", raw)
    return parts[0], parts[1]


def to_preferred_foot(raw: Any) -> Any:
    """Validate the preferred-foot value."""
    if is_missing(raw):
        return np.nan
    foot = str(raw).strip()
    if foot not in config.PREFERRED_FOOT:
        raise UnknownCategoryError("preferred_foot", raw)
    return foot


def _map_column(series: pd.Series, mapper: Callable[[Any], Any]) -> list:
    values = []
    row: Hashable
    for row, raw in series.items():
        try:
            values.append(mapper(raw))
        except UnknownCategoryError as exc:
            raise exc.with_row(row) from None
    return values


def _categorical(values: list, categories: Sequence, ordered: bool, index) -> pd.Series:
    return pd.Series(
        pd.Categorical(values, categories=list(categories), ordered=ordered),
        index=index,
    )


def normalize_categories(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of ``df`` with every categorical field on its fixed vocabulary.

    Adds:
    • field_position                         - Goalkeeper/Defender/Midfielder/Attack
    • work_rate_offense, work_rate_defense   - ordered Low < Medium < High
    • international_reputation, weak_foot,
      skill_moves                            - ordered 1 < … < 5
    • preferred_foot                         - Left/Right
    The raw ``work_rate`` column is dropped; raw ``position`` is kept for the
    identity table.
    """
    df = df.copy()
    index = df.index

    df["field_position"] = _categorical(
        _map_column(df["position"], to_field_position),
        config.FIELD_POSITIONS.keys(), False, index,
    )

    rates = _map_column(df["work_rate"], split_work_rate)
    df["work_rate_offense"] = _categorical([r[0] for r in rates], config.WORK_RATE_TIERS, True, index)
    df["work_rate_defense"] = _categorical([r[1] for r in rates], config.WORK_RATE_TIERS, True, index)

    for field in ORDINAL_FIELDS:
        tiers = _map_column(df[field], lambda raw, f=field: to_ordinal_tier(raw, f))
        df[field] = _categorical(tiers, config.ORDINAL_TIERS, True, index)

    df["preferred_foot"] = _categorical(
        _map_column(df["preferred_foot"], to_preferred_foot),
        config.PREFERRED_FOOT, False, index,
    )

    df = df.drop(columns=["work_rate"])
    logger.info(
        "Normalised categories; field positions: %s",
        df["field_position"].value_counts().to_dict(),
    )
    return df
