"""Concurrent writers must converge: one experiment per name, one matrix and schema per run."""
import threading
from concurrent.futures import ThreadPoolExecutor

from mlops.context import MLOpsContext
from mlops.entities import ConfusionMatrix, DataColumn, DataSchema
from mlops.storage.local_repository import LocalFileModelRepository
from mlops.storage.sql_store import SqlMetadataStore


def test_concurrent_create_experiment_yields_single_id(store):
    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda _: store.create_experiment("shared"), range(16)))

    assert len(set(ids)) == 1
    assert [e.name for e in store.list_experiments()] == ["shared"]


def test_two_stores_on_one_database_share_experiment_ids(sqlite_url, sql_store):
    other = SqlMetadataStore.from_url(sqlite_url)
    try:
        assert other.create_experiment("shared") == sql_store.create_experiment("shared")
    finally:
        other.db.dispose()


def test_concurrent_create_run_by_name_creates_one_run_per_call(store, tmp_path):
    ctx = MLOpsContext(store, LocalFileModelRepository(tmp_path))

    with ThreadPoolExecutor(max_workers=4) as pool:
        run_ids = list(pool.map(lambda _: ctx.lifecycle.create_run("Titanic"), range(8)))

    experiment = ctx.lifecycle.get_experiment("Titanic")
    assert len(set(run_ids)) == 8
    assert {r.id for r in ctx.lifecycle.list_runs(experiment.id)} == set(run_ids)


def _race(workers, call):
    barrier = threading.Barrier(workers)

    def task(i):
        barrier.wait()
        return call(i)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(task, range(workers)))


def test_concurrent_first_confusion_matrix_writes_all_upsert(store):
    run_id = store.create_run(store.create_experiment("test"))

    _race(8, lambda i: store.log_confusion_matrix(
        run_id,
        ConfusionMatrix(
            per_class_precision=(1.0, 1.0),
            per_class_recall=(1.0, 1.0),
            counts=((float(i), 0.0), (0.0, 1.0)),
            number_of_classes=2,
        ),
    ))

    stored = store.get_confusion_matrix(run_id)
    assert stored.number_of_classes == 2
    assert stored.counts[0][0] in {float(i) for i in range(8)}


def test_concurrent_first_data_schema_writes_all_upsert(store):
    run_id = store.create_run(store.create_experiment("test"))
    schema = DataSchema(column_count=2, columns=(DataColumn("Sentiment", "Boolean"), DataColumn("Review", "String")))

    _race(8, lambda _: store.log_data_schema(run_id, schema))

    stored = store.get_data_schema(run_id)
    assert stored.column_count == 2
    assert stored.columns == schema.columns
