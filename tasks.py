# tasks.py  ── invoke ≥2.2
from invoke import task  # type: ignore
from typing import Optional

import pathlib
import sys


BASE_ENV = pathlib.Path(__file__).parent
SRC_DIR = BASE_ENV / "src"


def _ensure_src_on_path() -> None:
    """Make the src/ packages importable when running from a checkout."""
    if str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))


@task(
    help={
        "players": "Players CSV (default: data/raw/players.csv)",
        "leagues": "Club → league CSV (default: data/raw/leagues.csv)",
        "seed": "Random seed for folds and models (default: 42)",
        "folds": "Number of outer folds (default: 20)",
        "scope": "Hyper-parameter selection scope: global | nested",
        "jobs": "Parallel fold workers (default: 1)",
        "track": "Log the run to MLflow",
    }
)
def evaluate(
    c,
    players: Optional[str] = None,
    leagues: Optional[str] = None,
    seed: Optional[int] = None,
    folds: Optional[int] = None,
    scope: Optional[str] = None,
    jobs: Optional[int] = None,
    track: bool = False,
) -> None:
    """Run the full model comparison and write the result tables to output/."""
    _ensure_src_on_path()
    from fifa_value_analysis.config import config, configure_logging
    from fifa_value_analysis.data.loader import DataLoader
    from fifa_value_analysis.pipeline import run_analysis

    configure_logging()
    overrides = {
        "random_state": seed,
        "n_folds": folds,
        "selection_scope": scope,
        "n_jobs": jobs,
    }
    cfg = config.update(**{k: v for k, v in overrides.items() if v is not None})

    loader = DataLoader()
    players_df = loader.load_players(players)
    leagues_df = loader.load_league_lookup(leagues)
    print(f"📥 Loaded {loader.get_data_summary()}")

    design, partition, result = run_analysis(players_df, leagues_df, cfg, track=track)

    cfg.ensure_directories()
    result.metrics.to_csv(cfg.METRICS_FILE)
    outliers = [table.assign(model=name) for name, table in result.outliers.items()]
    if outliers:
        import pandas as pd
        pd.concat(outliers, ignore_index=True).to_csv(cfg.OUTLIERS_FILE, index=False)

    print(f"\n📊 {design.n_rows} players, {partition.n_folds} folds")
    print("=" * 50)
    print(result.metrics.to_string(float_format=lambda v: f"{v:.4f}"))
    if not result.outlier_overlap.empty:
        print("\n🔎 Players flagged by several models:")
        print(result.outlier_overlap.to_string(index=False))
    for name, exc in result.failures.items():
        print(f"❌ {name}: {exc}")
    print(f"\n💾 Tables written to {cfg.OUTPUT_DIR}")


@task(help={"marker": "Only run tests matching this -k expression"})
def test(c, marker: Optional[str] = None) -> None:
    """Run the test suite."""
    cmd = "pytest -q"
    if marker:
        cmd += f' -k "{marker}"'
    c.run(cmd, pty=False)
