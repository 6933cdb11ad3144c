"""Tests for MLflow integration modules."""
import mlflow
import mlflow.artifacts
import numpy as np
import pytest

from fifa_value_analysis.evaluation.folds import make_folds
from fifa_value_analysis.evaluation.harness import EvaluationHarness
from fifa_value_analysis.models import LinearAdapter, MeanBaselineAdapter, RidgeAdapter
from mlops.experiment_utils import get_best_run, resolve_tracking_uri, setup_mlflow_experiment
from mlops.tracking import flatten_metrics, log_evaluation


class FailingAdapter(LinearAdapter):
    name = "failing"

    def minimum_rows(self, X, params):
        return 10_000


@pytest.fixture
def result():
    rng = np.random.default_rng(0)
    X = rng.normal(size=(30, 2))
    y = 10 + X @ np.array([1.0, -1.0]) + rng.normal(0, 0.1, 30)
    harness = EvaluationHarness([RidgeAdapter(), MeanBaselineAdapter(), FailingAdapter()], outlier_count=3)
    return harness.run_arrays(X, y, make_folds(30, 3, seed=0))


@pytest.fixture
def store(tmp_path):
    return (tmp_path / "mlruns").as_uri()


def test_experiment_setup(store):
    """Test that MLflow experiment setup works."""
    uri = setup_mlflow_experiment("test_experiment", tracking_uri=store)
    assert uri == store
    assert mlflow.get_experiment_by_name("test_experiment") is not None


def test_unreachable_server_falls_back(tmp_path):
    uri = resolve_tracking_uri("http://127.0.0.1:9", store_dir=str(tmp_path / "local"))
    assert uri.startswith("file:")
    assert (tmp_path / "local").is_dir()


def test_flatten_metrics(result):
    flat = flatten_metrics(result.metrics)
    assert "ridge_mse" in flat
    assert "mean_baseline_mape" in flat
    assert not any(key.startswith("failing_") for key in flat)


def test_log_evaluation(result, store):
    run_id = log_evaluation(
        result,
        {"n_folds": 3, "random_state": 42},
        experiment_name="test_log_evaluation",
        tracking_uri=store,
    )

    run = mlflow.tracking.MlflowClient().get_run(run_id)
    assert run.data.params["n_folds"] == "3"
    assert "ridge.alpha" in run.data.params
    assert run.data.metrics["ridge_mse"] == pytest.approx(result.metrics.loc["ridge", "mse"])
    assert run.data.metrics["best_mse"] == pytest.approx(result.metrics["mse"].min())

    artifacts = {a.path for a in mlflow.tracking.MlflowClient().list_artifacts(run_id)}
    assert {"metrics.json", "outliers.json", "failures.json"} <= artifacts

    failures = mlflow.artifacts.load_dict(f"{run.info.artifact_uri}/failures.json")
    assert list(failures) == ["failing"]

    best = get_best_run("test_log_evaluation")
    assert best["run_id"] == run_id
