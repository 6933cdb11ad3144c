"""MLflow experiment utilities."""
import logging
import pathlib
import re
import shutil
from typing import Any, Dict, Optional

import mlflow
import mlflow.tracking
import requests

from .config import EXPERIMENT_NAME, LOCAL_STORE_DIR, TRACKING_URI

_HEALTH_ENDPOINTS = ("/health", "/version")
_hex32 = re.compile(r"^[0-9a-f]{32}$", re.I)
logger = logging.getLogger(__name__)


def _ping_tracking_server(uri: str, timeout: float = 2.0) -> bool:
    """Return True iff an HTTP MLflow server is reachable at *uri*."""
    if not uri.startswith("http"):
        return False                        # file store - nothing to ping
    try:
        for ep in _HEALTH_ENDPOINTS:
            response = requests.get(uri.rstrip("/") + ep, timeout=timeout)
            response.raise_for_status()
        return True
    except requests.RequestException as exc:
        logger.debug("MLflow server ping failed: %s", exc)
        return False


def _sanitize_mlruns_dir(root: pathlib.Path) -> None:
    """
    Remove directories inside *root* that cannot possibly be valid
    MLflow experiments (file-store experiments MUST be numeric).
    """
    for p in root.iterdir():
        if p.is_dir() and _hex32.match(p.name) and not (p / "meta.yaml").exists():
            logger.warning("Removing orphan MLflow dir %s", p)
            shutil.rmtree(p, ignore_errors=True)


def _fallback_uri(store_dir: Optional[str] = None) -> str:
    """Local file store, created on first use."""
    local = pathlib.Path(store_dir or LOCAL_STORE_DIR).resolve()
    local.mkdir(parents=True, exist_ok=True)
    _sanitize_mlruns_dir(local)
    return local.as_uri()


def resolve_tracking_uri(uri: Optional[str] = None, store_dir: Optional[str] = None) -> str:
    """Use *uri* when it is a reachable server or an explicit file store, else a local store."""
    uri = TRACKING_URI if uri is None else uri
    if uri.startswith("file:"):
        return uri
    if _ping_tracking_server(uri):
        return uri
    if uri:
        logger.warning("MLflow server %s unreachable - using local store", uri)
    return _fallback_uri(store_dir)


def setup_mlflow_experiment(
    experiment_name: Optional[str] = None,
    tracking_uri: Optional[str] = None,
) -> str:
    """
    Resolve a reachable MLflow tracking URI and make sure the experiment exists.
    Returns the tracking URI in use.
    """
    exp_name = experiment_name or EXPERIMENT_NAME
    uri = resolve_tracking_uri(tracking_uri)
    mlflow.set_tracking_uri(uri)

    if mlflow.get_experiment_by_name(exp_name) is None:
        mlflow.create_experiment(exp_name)

    mlflow.set_experiment(exp_name)
    logger.info("Using MLflow experiment '%s' @ %s", exp_name, uri)
    return uri


def get_best_run(
    experiment_name: Optional[str] = None,
    metric_key: str = "best_mse",
    maximize: bool = False,
) -> Dict[str, Any]:
    """
    Return a *shallow* dict with run_id, metrics.*, and params.* keys
    so downstream code can use predictable dotted paths.
    """
    exp_name = experiment_name or EXPERIMENT_NAME
    exp = mlflow.get_experiment_by_name(exp_name)
    if exp is None:
        raise ValueError(f"Experiment '{exp_name}' not found")

    client = mlflow.tracking.MlflowClient()
    order = "DESC" if maximize else "ASC"
    runs = client.search_runs(
        [exp.experiment_id],
        order_by=[f"metrics.{metric_key} {order}"],
        max_results=1,
    )
    if not runs:
        raise ValueError(f"Experiment '{exp_name}' has no runs")
    run = runs[0]

    flat: Dict[str, Any] = {"run_id": run.info.run_id}
    for k, v in run.data.metrics.items():
        flat[f"metrics.{k}"] = v
    for k, v in run.data.params.items():
        flat[f"params.{k}"] = v
    return flat
