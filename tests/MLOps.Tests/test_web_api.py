"""Tests for the read-only query API."""
from datetime import timedelta
from uuid import uuid4

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from mlops.builder import MLOpsBuilder
from mlops.context import MLOpsContext
from mlops.storage.local_repository import LocalFileModelRepository
from mlops.storage.memory import InMemoryMetadataStore
from mlops.web import deps
from mlops.web.app import create_app
from mlops.web.deps import get_context


@pytest.fixture
def api_ctx(tmp_path):
    return MLOpsContext(InMemoryMetadataStore(), LocalFileModelRepository(tmp_path))


@pytest.fixture
def client(api_ctx):
    app = create_app()
    app.dependency_overrides[get_context] = lambda: api_ctx
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_experiment_and_runs_are_listed(client, api_ctx):
    run_id = api_ctx.lifecycle.create_run("Titanic")

    assert [e["name"] for e in client.get("/experiments").json()] == ["Titanic"]
    runs = client.get("/experiments/Titanic/runs").json()
    assert [r["id"] for r in runs] == [str(run_id)]


def test_unknown_experiment_returns_404(client):
    assert client.get("/experiments/missing").status_code == 404
    assert client.get("/experiments/missing/runs").status_code == 404


def test_run_details_and_logged_facts(client, api_ctx):
    run_id = api_ctx.lifecycle.create_run("Titanic")
    api_ctx.lifecycle.set_training_time(run_id, timedelta(minutes=5))
    api_ctx.evaluation.log_metric(run_id, "F1Score", 0.78)
    api_ctx.training.log_hyper_parameters(run_id, {"LearningRate": 0.1})
    api_ctx.evaluation.log_confusion_matrix(run_id, [[9, 1], [4, 36]])
    api_ctx.data.log_data(run_id, pd.DataFrame({"Sentiment": [True], "Review": ["ok"]}))

    run = client.get(f"/runs/{run_id}").json()
    assert run["id"] == str(run_id)
    assert run["training_time"] is not None

    metrics = client.get(f"/runs/{run_id}/metrics").json()
    assert [(m["name"], m["value"]) for m in metrics] == [("F1Score", 0.78)]

    params = client.get(f"/runs/{run_id}/hyperparameters").json()
    assert params == [{"name": "LearningRate", "value": "0.1"}]

    matrix = client.get(f"/runs/{run_id}/confusion-matrix").json()
    assert matrix["number_of_classes"] == 2
    assert matrix["counts"] == [[9.0, 1.0], [4.0, 36.0]]

    schema = client.get(f"/runs/{run_id}/data-schema").json()
    assert schema["column_count"] == 2
    assert {"name": "Sentiment", "type": "Boolean"} in schema["columns"]


def test_missing_run_and_unlogged_facts_return_404(client, api_ctx):
    assert client.get(f"/runs/{uuid4()}").status_code == 404
    assert client.get(f"/runs/{uuid4()}/metrics").status_code == 404

    run_id = api_ctx.lifecycle.create_run("Titanic")
    assert client.get(f"/runs/{run_id}/metrics").json() == []
    assert client.get(f"/runs/{run_id}/confusion-matrix").status_code == 404
    assert client.get(f"/runs/{run_id}/data-schema").status_code == 404


def test_malformed_run_id_is_rejected(client):
    assert client.get("/runs/not-a-uuid").status_code == 422


def test_lazy_context_never_creates_tables(tmp_path, monkeypatch):
    seen = {}

    def fake_from_env(cls, create_schema=None):
        seen["create_schema"] = create_schema
        return cls().use_metadata_store(InMemoryMetadataStore()).use_local_repository(tmp_path)

    monkeypatch.setattr(MLOpsBuilder, "from_env", classmethod(fake_from_env))
    monkeypatch.setattr(deps, "_context", None)

    assert isinstance(deps.get_context(), MLOpsContext)
    assert seen == {"create_schema": False}


def test_run_models_are_listed(client, api_ctx, tmp_path):
    run_id = api_ctx.lifecycle.create_run("Titanic")
    model_file = tmp_path / "model.zip"
    model_file.write_bytes(b"weights")
    reference = api_ctx.model.upload(run_id, model_file)

    assert client.get(f"/runs/{run_id}/models").json() == [{"key": reference.key, "version": reference.version}]
    assert client.get(f"/runs/{uuid4()}/models").status_code == 404
