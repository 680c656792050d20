"""Metadata store on a MongoDB document database.

One collection per entity. Identifiers are kept as UUID strings so the
documents read the same from any driver. Confusion matrices and data
schemas use the run id as ``_id``, which turns their upsert into a single
``replace_one``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional
from uuid import UUID, uuid4

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError

from mlops.entities import (
    ConfusionMatrix,
    DataColumn,
    DataSchema,
    Experiment,
    HyperParameter,
    Metric,
    Run,
)
from mlops.errors import NotFound, StorageError
from mlops.storage.types import MetadataStore

logger = logging.getLogger(__name__)


def _as_utc(ts: datetime) -> datetime:
    # BSON dates come back naive unless the client is tz_aware
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _micros(duration: timedelta) -> int:
    return duration // timedelta(microseconds=1)


class MongoMetadataStore(MetadataStore):
    """Persist experiments, runs and logged facts as MongoDB documents.

    ``database`` is a pymongo ``Database`` (or anything indexable by
    collection name that behaves like one).
    """

    def __init__(self, database: Any) -> None:
        self._experiments: Collection = database["experiments"]
        self._runs: Collection = database["runs"]
        self._metrics: Collection = database["metrics"]
        self._hyper_parameters: Collection = database["hyper_parameters"]
        self._confusion_matrices: Collection = database["confusion_matrices"]
        self._data_schemas: Collection = database["data_schemas"]
        self._ensure_indexes()

    @classmethod
    def from_url(cls, mongo_url: str, database: str = "mlops") -> "MongoMetadataStore":
        client: MongoClient = MongoClient(mongo_url, tz_aware=True)
        return cls(client[database])

    @contextmanager
    def _errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except PyMongoError as exc:
            raise StorageError(f"Failed to {action}: {exc}") from exc

    def _ensure_indexes(self) -> None:
        with self._errors("create metadata indexes"):
            self._experiments.create_index([("name", ASCENDING)], unique=True, name="uq_experiments_name")
            self._runs.create_index([("run_id", ASCENDING)], unique=True, name="uq_runs_run_id")
            self._runs.create_index(
                [("experiment_id", ASCENDING), ("created_at", ASCENDING)], name="ix_runs_experiment_created"
            )
            self._metrics.create_index([("run_id", ASCENDING)], name="ix_metrics_run_id")
            self._hyper_parameters.create_index([("run_id", ASCENDING)], name="ix_hyper_parameters_run_id")

    # ----- experiments -----

    def create_experiment(self, name: str) -> UUID:
        with self._errors(f"create experiment {name!r}"):
            existing = self._experiments.find_one({"name": name})
            if existing is not None:
                return UUID(existing["_id"])
            experiment_id = uuid4()
            try:
                self._experiments.insert_one({"_id": str(experiment_id), "name": name})
            except DuplicateKeyError:
                # another writer inserted the same name first; the unique index decided
                logger.debug("Experiment %r created concurrently, reading the stored id", name)
                existing = self._experiments.find_one({"name": name})
                if existing is None:
                    raise StorageError(f"Experiment {name!r} violated uniqueness but cannot be read back")
                return UUID(existing["_id"])
        logger.info("Created experiment %r (%s)", name, experiment_id)
        return experiment_id

    def get_experiment(self, name: str) -> Optional[Experiment]:
        with self._errors(f"read experiment {name!r}"):
            doc = self._experiments.find_one({"name": name})
        return Experiment(id=UUID(doc["_id"]), name=doc["name"]) if doc is not None else None

    def list_experiments(self) -> List[Experiment]:
        with self._errors("list experiments"):
            docs = list(self._experiments.find().sort("name", ASCENDING))
        return [Experiment(id=UUID(d["_id"]), name=d["name"]) for d in docs]

    # ----- runs -----

    def create_run(self, experiment_id: UUID) -> UUID:
        run_id = uuid4()
        with self._errors(f"create run in experiment {experiment_id}"):
            if self._experiments.find_one({"_id": str(experiment_id)}) is None:
                raise NotFound(f"experiment {experiment_id} does not exist")
            self._runs.insert_one(
                {
                    "run_id": str(run_id),
                    "experiment_id": str(experiment_id),
                    "created_at": datetime.now(tz=timezone.utc),
                    "training_time_us": None,
                }
            )
        logger.info("Created run %s in experiment %s", run_id, experiment_id)
        return run_id

    def get_run(self, run_id: UUID) -> Optional[Run]:
        with self._errors(f"read run {run_id}"):
            doc = self._runs.find_one({"run_id": str(run_id)})
        return self._to_run(doc) if doc is not None else None

    def list_runs(self, experiment_id: UUID) -> List[Run]:
        with self._errors(f"list runs of experiment {experiment_id}"):
            # _id breaks ties between runs created within one BSON millisecond
            docs = list(
                self._runs.find({"experiment_id": str(experiment_id)}).sort(
                    [("created_at", ASCENDING), ("_id", ASCENDING)]
                )
            )
        return [self._to_run(d) for d in docs]

    def set_training_time(self, run_id: UUID, duration: timedelta) -> None:
        with self._errors(f"set training time of run {run_id}"):
            result = self._runs.update_one({"run_id": str(run_id)}, {"$set": {"training_time_us": _micros(duration)}})
            if result.matched_count == 0:
                raise NotFound(f"run {run_id} does not exist")

    # ----- metrics & hyperparameters -----

    def log_metric(self, run_id: UUID, name: str, value: float) -> None:
        with self._errors(f"log metric {name!r} on run {run_id}"):
            self._require_run(run_id)
            self._metrics.insert_one(
                {"run_id": str(run_id), "name": name, "value": float(value), "logged_at": datetime.now(tz=timezone.utc)}
            )
        logger.debug("Logged metric %s=%s on run %s", name, value, run_id)

    def get_metrics(self, run_id: UUID) -> List[Metric]:
        with self._errors(f"read metrics of run {run_id}"):
            docs = list(self._metrics.find({"run_id": str(run_id)}).sort("_id", ASCENDING))
        return [
            Metric(run_id=run_id, name=d["name"], value=d["value"], logged_at=_as_utc(d["logged_at"])) for d in docs
        ]

    def log_hyper_parameters(self, run_id: UUID, parameters: Mapping[str, str]) -> None:
        with self._errors(f"log hyperparameters on run {run_id}"):
            self._require_run(run_id)
            docs = [{"run_id": str(run_id), "name": name, "value": str(value)} for name, value in parameters.items()]
            if docs:
                self._hyper_parameters.insert_many(docs, ordered=True)
        logger.debug("Logged %d hyperparameters on run %s", len(parameters), run_id)

    def get_hyper_parameters(self, run_id: UUID) -> List[HyperParameter]:
        with self._errors(f"read hyperparameters of run {run_id}"):
            docs = list(self._hyper_parameters.find({"run_id": str(run_id)}).sort("_id", ASCENDING))
        return [HyperParameter(run_id=run_id, name=d["name"], value=d["value"]) for d in docs]

    # ----- confusion matrix -----

    def log_confusion_matrix(self, run_id: UUID, matrix: ConfusionMatrix) -> None:
        self._replace_for_run(
            self._confusion_matrices,
            run_id,
            {
                "per_class_precision": list(matrix.per_class_precision),
                "per_class_recall": list(matrix.per_class_recall),
                "counts": [list(r) for r in matrix.counts],
                "number_of_classes": matrix.number_of_classes,
            },
        )

    def get_confusion_matrix(self, run_id: UUID) -> Optional[ConfusionMatrix]:
        with self._errors(f"read confusion matrix of run {run_id}"):
            doc = self._confusion_matrices.find_one({"_id": str(run_id)})
        if doc is None:
            return None
        return ConfusionMatrix(
            per_class_precision=tuple(doc["per_class_precision"]),
            per_class_recall=tuple(doc["per_class_recall"]),
            counts=tuple(tuple(r) for r in doc["counts"]),
            number_of_classes=doc["number_of_classes"],
            run_id=run_id,
        )

    # ----- data schema -----

    def log_data_schema(self, run_id: UUID, schema: DataSchema) -> None:
        self._replace_for_run(
            self._data_schemas,
            run_id,
            {
                "column_count": schema.column_count,
                "columns": [{"name": c.name, "type": c.type} for c in schema.columns],
            },
        )

    def get_data_schema(self, run_id: UUID) -> Optional[DataSchema]:
        with self._errors(f"read data schema of run {run_id}"):
            doc = self._data_schemas.find_one({"_id": str(run_id)})
        if doc is None:
            return None
        return DataSchema(
            column_count=doc["column_count"],
            columns=tuple(DataColumn(name=c["name"], type=c["type"]) for c in doc["columns"]),
            run_id=run_id,
        )

    # ----- helpers -----

    def _replace_for_run(self, collection: Collection, run_id: UUID, document: Dict[str, Any]) -> None:
        key = {"_id": str(run_id)}
        with self._errors(f"write {collection.name} for run {run_id}"):
            self._require_run(run_id)
            try:
                collection.replace_one(key, document, upsert=True)
            except DuplicateKeyError:
                # a concurrent upsert inserted the document first; this one now matches it
                logger.debug("%s for run %s inserted concurrently, replacing it", collection.name, run_id)
                collection.replace_one(key, document, upsert=True)

    def _require_run(self, run_id: UUID) -> None:
        if self._runs.find_one({"run_id": str(run_id)}, {"_id": 1}) is None:
            raise NotFound(f"run {run_id} does not exist")

    @staticmethod
    def _to_run(doc: Mapping[str, Any]) -> Run:
        micros = doc.get("training_time_us")
        return Run(
            id=UUID(doc["run_id"]),
            experiment_id=UUID(doc["experiment_id"]),
            created_at=_as_utc(doc["created_at"]),
            training_time=timedelta(microseconds=micros) if micros is not None else None,
        )
