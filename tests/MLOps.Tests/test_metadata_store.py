"""Contract tests for MetadataStore backends (in-memory, SQLite and MongoDB)."""
from datetime import timedelta
from uuid import uuid4

import pytest

from mlops.entities import ConfusionMatrix, DataColumn, DataSchema
from mlops.errors import NotFound


def test_create_experiment_is_idempotent_per_name(store):
    first = store.create_experiment("test")
    second = store.create_experiment("test")
    other = store.create_experiment("other")

    assert first == second
    assert other != first


def test_get_experiment_returns_created_experiment(store):
    experiment_id = store.create_experiment("test")

    experiment = store.get_experiment("test")

    assert experiment is not None
    assert experiment.id == experiment_id
    assert experiment.name == "test"


def test_get_experiment_unknown_name_returns_none(store):
    assert store.get_experiment("missing") is None


def test_list_experiments_ordered_by_name(store):
    store.create_experiment("b")
    store.create_experiment("a")

    assert [e.name for e in store.list_experiments()] == ["a", "b"]


def test_create_run_records_experiment_and_creation_time(store):
    experiment_id = store.create_experiment("test")

    run_id = store.create_run(experiment_id)
    run = store.get_run(run_id)

    assert run is not None
    assert run.id == run_id
    assert run.experiment_id == experiment_id
    assert run.created_at is not None
    assert run.created_at.tzinfo is not None
    assert run.training_time is None


def test_create_run_unknown_experiment_raises_not_found(store):
    with pytest.raises(NotFound):
        store.create_run(uuid4())


def test_get_run_unknown_id_returns_none(store):
    assert store.get_run(uuid4()) is None


def test_list_runs_returns_runs_of_one_experiment(store):
    experiment_id = store.create_experiment("test")
    other_id = store.create_experiment("other")
    first = store.create_run(experiment_id)
    second = store.create_run(experiment_id)
    store.create_run(other_id)

    assert [r.id for r in store.list_runs(experiment_id)] == [first, second]


def test_set_training_time_overwrites_previous_value(store):
    run_id = store.create_run(store.create_experiment("test"))

    store.set_training_time(run_id, timedelta(minutes=5))
    assert store.get_run(run_id).training_time == timedelta(minutes=5)

    store.set_training_time(run_id, timedelta(minutes=10))
    assert store.get_run(run_id).training_time == timedelta(minutes=10)


def test_set_training_time_unknown_run_raises_not_found(store):
    with pytest.raises(NotFound):
        store.set_training_time(uuid4(), timedelta(seconds=1))


def test_log_metric_is_returned_by_get_metrics(store):
    run_id = store.create_run(store.create_experiment("test"))

    store.log_metric(run_id, "F1Score", 0.78)

    metrics = store.get_metrics(run_id)
    assert len(metrics) == 1
    assert metrics[0].name == "F1Score"
    assert metrics[0].value == 0.78
    assert metrics[0].run_id == run_id


def test_metrics_with_same_name_are_all_kept_in_logging_order(store):
    run_id = store.create_run(store.create_experiment("test"))

    for value in (0.1, 0.2, 0.3):
        store.log_metric(run_id, "loss", value)

    assert [m.value for m in store.get_metrics(run_id)] == [0.1, 0.2, 0.3]


def test_get_metrics_without_logging_returns_empty_list(store):
    run_id = store.create_run(store.create_experiment("test"))

    assert store.get_metrics(run_id) == []


def test_log_metric_unknown_run_raises_not_found(store):
    with pytest.raises(NotFound):
        store.log_metric(uuid4(), "F1Score", 0.5)


def test_log_hyper_parameters_appends_one_record_per_pair(store):
    run_id = store.create_run(store.create_experiment("test"))

    store.log_hyper_parameters(run_id, {"LearningRate": "0.1", "IterationCount": "50"})
    store.log_hyper_parameters(run_id, {"LearningRate": "0.01"})

    params = [(p.name, p.value) for p in store.get_hyper_parameters(run_id)]
    assert params == [("LearningRate", "0.1"), ("IterationCount", "50"), ("LearningRate", "0.01")]


def test_log_hyper_parameters_unknown_run_raises_not_found(store):
    with pytest.raises(NotFound):
        store.log_hyper_parameters(uuid4(), {"a": "1"})


def test_get_confusion_matrix_before_logging_returns_none(store):
    run_id = store.create_run(store.create_experiment("test"))

    assert store.get_confusion_matrix(run_id) is None


def test_log_confusion_matrix_replaces_existing_matrix(store):
    run_id = store.create_run(store.create_experiment("test"))
    first = ConfusionMatrix(
        per_class_precision=(0.99, 0.44),
        per_class_recall=(0.77, 0.88),
        counts=((9.0, 1.0), (4.0, 33.0)),
        number_of_classes=2,
    )
    second = ConfusionMatrix(
        per_class_precision=(1.0, 1.0),
        per_class_recall=(1.0, 1.0),
        counts=((10.0, 0.0), (0.0, 37.0)),
        number_of_classes=2,
    )

    store.log_confusion_matrix(run_id, first)
    assert store.get_confusion_matrix(run_id).counts == ((9.0, 1.0), (4.0, 33.0))

    store.log_confusion_matrix(run_id, second)
    stored = store.get_confusion_matrix(run_id)
    assert stored.per_class_precision == (1.0, 1.0)
    assert stored.per_class_recall == (1.0, 1.0)
    assert stored.counts == ((10.0, 0.0), (0.0, 37.0))
    assert stored.number_of_classes == 2
    assert stored.run_id == run_id


def test_data_schema_upsert_keeps_column_order(store):
    run_id = store.create_run(store.create_experiment("test"))
    assert store.get_data_schema(run_id) is None

    store.log_data_schema(
        run_id,
        DataSchema(column_count=2, columns=(DataColumn("Sentiment", "Boolean"), DataColumn("Review", "String"))),
    )
    store.log_data_schema(
        run_id,
        DataSchema(column_count=1, columns=(DataColumn("Age", "Float"),)),
    )

    schema = store.get_data_schema(run_id)
    assert schema.column_count == 1
    assert schema.columns == (DataColumn("Age", "Float"),)


def test_log_data_schema_unknown_run_raises_not_found(store):
    with pytest.raises(NotFound):
        store.log_data_schema(uuid4(), DataSchema(column_count=0, columns=()))
