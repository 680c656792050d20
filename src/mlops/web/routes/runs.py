from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from mlops.context import MLOpsContext
from mlops.web.deps import get_context
from mlops.web.routes.experiments import RunOut, to_run_schema

router = APIRouter(prefix="/runs", tags=["runs"])


class MetricOut(BaseModel):
    name: str
    value: float
    logged_at: datetime


class HyperParameterOut(BaseModel):
    name: str
    value: str


class ConfusionMatrixOut(BaseModel):
    per_class_precision: List[float]
    per_class_recall: List[float]
    counts: List[List[float]]
    number_of_classes: int


class DataColumnOut(BaseModel):
    name: str
    type: str


class DataSchemaOut(BaseModel):
    column_count: int
    columns: List[DataColumnOut]


class ModelArtifactOut(BaseModel):
    key: str
    version: str


def _require_run(ctx: MLOpsContext, run_id: UUID) -> None:
    if ctx.lifecycle.get_run(run_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="run not found")


@router.get("/{run_id}", response_model=RunOut)
def get_run(run_id: UUID, ctx: MLOpsContext = Depends(get_context)) -> RunOut:
    run = ctx.lifecycle.get_run(run_id)
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="run not found")
    return to_run_schema(run)


@router.get("/{run_id}/metrics", response_model=List[MetricOut])
def get_metrics(run_id: UUID, ctx: MLOpsContext = Depends(get_context)) -> List[MetricOut]:
    """Metrics in the order they were logged."""
    _require_run(ctx, run_id)
    return [MetricOut(name=m.name, value=m.value, logged_at=m.logged_at) for m in ctx.evaluation.get_metrics(run_id)]


@router.get("/{run_id}/hyperparameters", response_model=List[HyperParameterOut])
def get_hyper_parameters(run_id: UUID, ctx: MLOpsContext = Depends(get_context)) -> List[HyperParameterOut]:
    _require_run(ctx, run_id)
    return [HyperParameterOut(name=h.name, value=h.value) for h in ctx.training.get_hyper_parameters(run_id)]


@router.get("/{run_id}/confusion-matrix", response_model=ConfusionMatrixOut)
def get_confusion_matrix(run_id: UUID, ctx: MLOpsContext = Depends(get_context)) -> ConfusionMatrixOut:
    matrix = ctx.evaluation.get_confusion_matrix(run_id)
    if matrix is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="confusion matrix not logged")
    return ConfusionMatrixOut(
        per_class_precision=list(matrix.per_class_precision),
        per_class_recall=list(matrix.per_class_recall),
        counts=[list(row) for row in matrix.counts],
        number_of_classes=matrix.number_of_classes,
    )


@router.get("/{run_id}/data-schema", response_model=DataSchemaOut)
def get_data_schema(run_id: UUID, ctx: MLOpsContext = Depends(get_context)) -> DataSchemaOut:
    schema = ctx.data.get_data(run_id)
    if schema is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="data schema not logged")
    return DataSchemaOut(
        column_count=schema.column_count,
        columns=[DataColumnOut(name=c.name, type=c.type) for c in schema.columns],
    )


@router.get("/{run_id}/models", response_model=List[ModelArtifactOut])
def list_models(run_id: UUID, ctx: MLOpsContext = Depends(get_context)) -> List[ModelArtifactOut]:
    """Uploaded model artifacts, oldest first."""
    _require_run(ctx, run_id)
    return [ModelArtifactOut(key=a.key, version=a.version) for a in ctx.model.list_models(run_id)]
