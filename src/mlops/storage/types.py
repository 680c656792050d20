from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import List, Mapping, Optional, Protocol, Union
from uuid import UUID

from mlops.entities import (
    ArtifactReference,
    ConfusionMatrix,
    DataSchema,
    Experiment,
    HyperParameter,
    Metric,
    Run,
)


class MetadataStore(Protocol):
    """Persistence contract for every tracked entity except artifact bytes.

    Lookups of things that were never logged return ``None`` or an empty
    list. Writes against an unknown experiment or run raise ``NotFound``.
    Backend failures raise ``StorageError``.
    """

    def create_experiment(self, name: str) -> UUID:
        ...

    def get_experiment(self, name: str) -> Optional[Experiment]:
        ...

    def list_experiments(self) -> List[Experiment]:
        ...

    def create_run(self, experiment_id: UUID) -> UUID:
        ...

    def get_run(self, run_id: UUID) -> Optional[Run]:
        ...

    def list_runs(self, experiment_id: UUID) -> List[Run]:
        ...

    def set_training_time(self, run_id: UUID, duration: timedelta) -> None:
        ...

    def log_metric(self, run_id: UUID, name: str, value: float) -> None:
        ...

    def get_metrics(self, run_id: UUID) -> List[Metric]:
        ...

    def log_hyper_parameters(self, run_id: UUID, parameters: Mapping[str, str]) -> None:
        ...

    def get_hyper_parameters(self, run_id: UUID) -> List[HyperParameter]:
        ...

    def log_confusion_matrix(self, run_id: UUID, matrix: ConfusionMatrix) -> None:
        ...

    def get_confusion_matrix(self, run_id: UUID) -> Optional[ConfusionMatrix]:
        ...

    def log_data_schema(self, run_id: UUID, schema: DataSchema) -> None:
        ...

    def get_data_schema(self, run_id: UUID) -> Optional[DataSchema]:
        ...


class ModelRepository(Protocol):
    """Persistence contract for trained-model binaries."""

    def upload_model(self, run_id: UUID, file_path: Union[str, Path]) -> ArtifactReference:
        ...

    def download_model(
        self, reference: ArtifactReference, destination: Optional[Union[str, Path]] = None
    ) -> Path:
        ...

    def list_models(self, run_id: UUID) -> List[ArtifactReference]:
        ...
