from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Mapping, Optional
from uuid import UUID, uuid4

from mlops.entities import (
    ConfusionMatrix,
    DataSchema,
    Experiment,
    HyperParameter,
    Metric,
    Run,
)
from mlops.errors import NotFound
from mlops.storage.types import MetadataStore


class InMemoryMetadataStore(MetadataStore):
    """
    A thread-safe in-process metadata store.

    Nothing survives the process; use it for tests and throwaway runs.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._experiments: Dict[str, Experiment] = {}
        self._runs: Dict[UUID, Run] = {}
        self._metrics: Dict[UUID, List[Metric]] = {}
        self._hyper_parameters: Dict[UUID, List[HyperParameter]] = {}
        self._confusion_matrices: Dict[UUID, ConfusionMatrix] = {}
        self._data_schemas: Dict[UUID, DataSchema] = {}

    def create_experiment(self, name: str) -> UUID:
        with self._lock:
            existing = self._experiments.get(name)
            if existing is not None:
                return existing.id
            experiment = Experiment(id=uuid4(), name=name)
            self._experiments[name] = experiment
            return experiment.id

    def get_experiment(self, name: str) -> Optional[Experiment]:
        with self._lock:
            return self._experiments.get(name)

    def list_experiments(self) -> List[Experiment]:
        with self._lock:
            return sorted(self._experiments.values(), key=lambda e: e.name)

    def create_run(self, experiment_id: UUID) -> UUID:
        with self._lock:
            if not any(e.id == experiment_id for e in self._experiments.values()):
                raise NotFound(f"experiment {experiment_id} does not exist")
            run = Run(id=uuid4(), experiment_id=experiment_id, created_at=datetime.now(tz=timezone.utc))
            self._runs[run.id] = run
            return run.id

    def get_run(self, run_id: UUID) -> Optional[Run]:
        with self._lock:
            return self._runs.get(run_id)

    def list_runs(self, experiment_id: UUID) -> List[Run]:
        with self._lock:
            runs = [r for r in self._runs.values() if r.experiment_id == experiment_id]
        return sorted(runs, key=lambda r: r.created_at)

    def set_training_time(self, run_id: UUID, duration: timedelta) -> None:
        with self._lock:
            run = self._require_run(run_id)
            self._runs[run_id] = replace(run, training_time=duration)

    def log_metric(self, run_id: UUID, name: str, value: float) -> None:
        with self._lock:
            self._require_run(run_id)
            metric = Metric(run_id=run_id, name=name, value=float(value), logged_at=datetime.now(tz=timezone.utc))
            self._metrics.setdefault(run_id, []).append(metric)

    def get_metrics(self, run_id: UUID) -> List[Metric]:
        with self._lock:
            return list(self._metrics.get(run_id, []))

    def log_hyper_parameters(self, run_id: UUID, parameters: Mapping[str, str]) -> None:
        with self._lock:
            self._require_run(run_id)
            rows = self._hyper_parameters.setdefault(run_id, [])
            for name, value in parameters.items():
                rows.append(HyperParameter(run_id=run_id, name=name, value=str(value)))

    def get_hyper_parameters(self, run_id: UUID) -> List[HyperParameter]:
        with self._lock:
            return list(self._hyper_parameters.get(run_id, []))

    def log_confusion_matrix(self, run_id: UUID, matrix: ConfusionMatrix) -> None:
        with self._lock:
            self._require_run(run_id)
            self._confusion_matrices[run_id] = replace(matrix, run_id=run_id)

    def get_confusion_matrix(self, run_id: UUID) -> Optional[ConfusionMatrix]:
        with self._lock:
            return self._confusion_matrices.get(run_id)

    def log_data_schema(self, run_id: UUID, schema: DataSchema) -> None:
        with self._lock:
            self._require_run(run_id)
            self._data_schemas[run_id] = replace(schema, run_id=run_id)

    def get_data_schema(self, run_id: UUID) -> Optional[DataSchema]:
        with self._lock:
            return self._data_schemas.get(run_id)

    def _require_run(self, run_id: UUID) -> Run:
        # caller holds the lock
        run = self._runs.get(run_id)
        if run is None:
            raise NotFound(f"run {run_id} does not exist")
        return run
