"""Central MLflow configuration for consistent experiment tracking."""
import os

# ─── MLflow configuration ──────────────────────────────────────────────────
# An http(s) URI is pinged first; anything else (or an unreachable server)
# falls back to a local file store
TRACKING_URI = os.getenv("MLFLOW_TRACKING_URI", "")
EXPERIMENT_NAME = "fifa_value_analysis"
LOCAL_STORE_DIR = os.getenv("MLFLOW_LOCAL_STORE", "mlruns_local")
