"""
Field parsing for raw FIFA player records.

Every ``parse_*`` function is pure and works on one raw value. Missing raw
values come back as NaN and are dropped later by the preprocessor; values
that are present but unparseable raise ``MalformedFieldError``.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Callable, Hashable

import numpy as np
import pandas as pd

from fifa_value_analysis.config import config
from fifa_value_analysis.exceptions import MalformedFieldError

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"^\d+(?:\.\d+)?$")
_WEIGHT = re.compile(r"^(\d+(?:\.\d+)?)\s*" + re.escape(config.WEIGHT_SUFFIX) + r"$")
_YEAR = re.compile(r"(?<!\d)(\d{4})(?!\d)")

CURRENCY_FIELDS = ("value", "wage", "release_clause")


def is_missing(raw: Any) -> bool:
    """True for None, NaN and blank strings."""
    if raw is None:
        return True
    if isinstance(raw, float) and np.isnan(raw):
        return True
    return isinstance(raw, str) and not raw.strip()


def parse_currency(raw: Any, field: str = "value") -> float:
    """
    Convert ``"€1.5M"`` / ``"€500K"`` to millions of euros.

    Amounts need an ``M`` or ``K`` suffix, with one exception: a bare
    ``"€0"`` marks an undisclosed amount and parses to NaN. Any other
    suffix-less amount (``"€5"``, ``"€0.0"``) raises ``MalformedFieldError``.
    """
    if is_missing(raw):
        return np.nan
    text = str(raw).strip()
    if not text.startswith(config.CURRENCY_SYMBOL):
        raise MalformedFieldError(field, raw)
    amount = text[len(config.CURRENCY_SYMBOL):].strip()

    if amount.endswith(config.MILLION_SUFFIX):
        scale = 1.0
    elif amount.endswith(config.THOUSAND_SUFFIX):
        scale = 1.0 / 1000
    elif amount == "0":
        return np.nan
    else:
        raise MalformedFieldError(field, raw)

    number = amount[:-1].strip()
    if not _NUMBER.match(number):
        raise MalformedFieldError(field, raw)
    return float(number) * scale


def parse_height(raw: Any) -> float:
    """Convert feet'inches (``"5'11"``) to centimetres."""
    if is_missing(raw):
        return np.nan
    parts = str(raw).strip().split(config.HEIGHT_DELIMITER)
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise MalformedFieldError("height", raw)
    feet, inches = int(parts[0]), int(parts[1])
    return (feet * 12 + inches) * config.INCH_TO_CM


def parse_weight(raw: Any) -> float:
    """Convert ``"170lbs"`` to kilograms."""
    if is_missing(raw):
        return np.nan
    match = _WEIGHT.match(str(raw).strip())
    if match is None:
        raise MalformedFieldError("weight", raw)
    return float(match.group(1)) * config.POUNDS_TO_KG


def parse_contract_year(raw: Any) -> float:
    """Pull the end year out of ``"2021"`` or ``"Jun 30, 2019"``."""
    if is_missing(raw):
        return np.nan
    match = _YEAR.search(str(raw))
    if match is None:
        raise MalformedFieldError("contract_valid_until", raw)
    return float(match.group(1))


def _parse_column(series: pd.Series, parser: Callable[[Any], float]) -> pd.Series:
    """Apply ``parser`` row by row, tagging the first fault with its row label."""
    values = []
    row: Hashable
    for row, raw in series.items():
        try:
            values.append(parser(raw))
        except MalformedFieldError as exc:
            raise exc.with_row(row) from None
    return pd.Series(values, index=series.index, dtype=float)


def parse_numeric(raw: Any, field: str) -> float:
    """Plain numeric attribute such as age or overall rating."""
    if is_missing(raw):
        return np.nan
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise MalformedFieldError(field, raw) from None


def parse_numeric_columns(df: pd.DataFrame, columns) -> pd.DataFrame:
    """Return a copy of ``df`` with ``columns`` coerced to float."""
    df = df.copy()
    for column in columns:
        df[column] = _parse_column(df[column], lambda raw, f=column: parse_numeric(raw, f))
    return df


def parse_player_fields(df: pd.DataFrame) -> pd.DataFrame:
    """
    Return a copy of ``df`` with financial and physical fields in numeric units.

    Adds/overwrites:
    • value, release_clause  - millions of euros
    • wage                   - thousands of euros
    • height_cm, weight_kg   - metric units
    • contract_years         - contract end year minus the reference year
    Raw ``height``, ``weight`` and ``contract_valid_until`` columns are dropped.
    """
    df = df.copy()

    for column in CURRENCY_FIELDS:
        millions = _parse_column(df[column], lambda raw, f=column: parse_currency(raw, f))
        df[column] = millions * 1000 if column == "wage" else millions

    df["height_cm"] = _parse_column(df["height"], parse_height)
    df["weight_kg"] = _parse_column(df["weight"], parse_weight)
    end_year = _parse_column(df["contract_valid_until"], parse_contract_year)
    df["contract_years"] = end_year - config.REFERENCE_YEAR

    df = df.drop(columns=["height", "weight", "contract_valid_until"])
    logger.info("Parsed financial and physical fields for %d players", len(df))
    return df
