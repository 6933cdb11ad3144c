"""MLflow experiment tracking for model comparison runs."""

from .experiment_utils import get_best_run, setup_mlflow_experiment
from .tracking import log_evaluation

__all__ = ['setup_mlflow_experiment', 'get_best_run', 'log_evaluation']
