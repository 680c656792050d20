"""Plain records returned by the metadata store and the model repository."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import UUID


@dataclass(frozen=True)
class Experiment:
    id: UUID
    name: str


@dataclass(frozen=True)
class Run:
    id: UUID
    experiment_id: UUID
    created_at: datetime
    training_time: Optional[timedelta] = None


@dataclass(frozen=True)
class Metric:
    run_id: UUID
    name: str
    value: float
    logged_at: datetime


@dataclass(frozen=True)
class HyperParameter:
    run_id: UUID
    name: str
    value: str


@dataclass(frozen=True)
class ConfusionMatrix:
    per_class_precision: Tuple[float, ...]
    per_class_recall: Tuple[float, ...]
    counts: Tuple[Tuple[float, ...], ...]  # rows = actual, columns = predicted
    number_of_classes: int
    run_id: Optional[UUID] = None


@dataclass(frozen=True)
class DataColumn:
    name: str
    type: str


@dataclass(frozen=True)
class DataSchema:
    column_count: int
    columns: Tuple[DataColumn, ...]
    run_id: Optional[UUID] = None


@dataclass(frozen=True)
class ArtifactReference:
    run_id: UUID
    key: str
    version: str
