"""Shared synthetic FIFA tables for the test-suite."""
import numpy as np
import pandas as pd
import pytest

from fifa_value_analysis.config import config

LEAGUES = [f"League {c}" for c in "ABCDEFGH"]
CLUBS = {f"{league} FC {i}": league for league in LEAGUES for i in (1, 2)}
N_PLAYERS = 160


def _money(millions: float) -> str:
    if millions >= 1:
        return f"€{millions:.1f}M"
    return f"€{millions * 1000:.0f}K"


@pytest.fixture
def league_lookup():
    """Eight complete leagues of two clubs each plus one excluded league."""
    rows = [{"club": club, "league": league} for club, league in CLUBS.items()]
    rows.append({"club": "World XI", "league": "Rest of World"})
    return pd.DataFrame(rows)


@pytest.fixture
def raw_players():
    """
    Raw player table in the scraped string format.

    Row 1 has no value, row 2 plays for a club missing from the lookup and
    row 3 for a club of an excluded league, so three rows are dropped.
    """
    rng = np.random.default_rng(0)
    codes = [code for group in config.FIELD_POSITIONS.values() for code in group]
    clubs = list(CLUBS)
    tiers = list(config.WORK_RATE_TIERS)

    records = []
    for i in range(N_PLAYERS):
        club = clubs[i % len(clubs)]
        overall = int(rng.integers(50, 95))
        league_boost = 1.0 + LEAGUES.index(CLUBS[club]) / 4
        value = max(0.1, np.exp((overall - 50) / 10) * 0.2 * league_boost + rng.normal(0, 0.2))
        records.append({
            "name": f"Player {i}",
            "nationality": rng.choice(["Spain", "Brazil", "France"]),
            "club": club,
            "position": codes[i % len(codes)],
            "age": int(rng.integers(17, 38)),
            "overall": overall,
            "potential": overall + int(rng.integers(0, 10)),
            "special": int(rng.integers(1000, 2300)),
            "value": _money(value),
            "wage": f"€{int(rng.integers(1, 300))}K",
            "release_clause": _money(value * 1.8),
            "height": f"{int(rng.integers(5, 7))}'{int(rng.integers(0, 12))}",
            "weight": f"{int(rng.integers(140, 200))}lbs",
            "contract_valid_until": str(int(rng.integers(2019, 2024))),
            "international_reputation": int(rng.integers(1, 6)),
            "weak_foot": float(rng.integers(1, 6)),
            "skill_moves": float(rng.integers(1, 6)),
            "work_rate": f"{rng.choice(tiers)}/ {rng.choice(tiers)}",
            "preferred_foot": rng.choice(["Left", "Right"]),
        })
    players = pd.DataFrame(records)
    players.loc[1, "value"] = np.nan
    players.loc[2, "club"] = "Unknown FC"
    players.loc[3, "club"] = "World XI"
    players.loc[4, "contract_valid_until"] = "Jun 30, 2019"
    return players


@pytest.fixture
def linear_data():
    """Noisy linear target over three standard-normal features."""
    rng = np.random.default_rng(1)
    X = rng.normal(size=(60, 3))
    y = 5 + X @ np.array([1.0, 2.0, -1.0]) + rng.normal(0, 0.1, size=60)
    return X, y
