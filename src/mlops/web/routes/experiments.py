from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from mlops.context import MLOpsContext
from mlops.entities import Experiment, Run
from mlops.web.deps import get_context

router = APIRouter(prefix="/experiments", tags=["experiments"])


class ExperimentOut(BaseModel):
    id: UUID
    name: str


class RunOut(BaseModel):
    id: UUID
    experiment_id: UUID
    created_at: datetime
    training_time: Optional[timedelta] = None


def _to_experiment(obj: Experiment) -> ExperimentOut:
    return ExperimentOut(id=obj.id, name=obj.name)


def to_run_schema(obj: Run) -> RunOut:
    return RunOut(
        id=obj.id,
        experiment_id=obj.experiment_id,
        created_at=obj.created_at,
        training_time=obj.training_time,
    )


def _require_experiment(ctx: MLOpsContext, name: str) -> Experiment:
    experiment = ctx.lifecycle.get_experiment(name)
    if experiment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="experiment not found")
    return experiment


@router.get("", response_model=List[ExperimentOut])
def list_experiments(ctx: MLOpsContext = Depends(get_context)) -> List[ExperimentOut]:
    """List all experiments ordered by name."""
    return [_to_experiment(e) for e in ctx.lifecycle.list_experiments()]


@router.get("/{name}", response_model=ExperimentOut)
def get_experiment(name: str, ctx: MLOpsContext = Depends(get_context)) -> ExperimentOut:
    return _to_experiment(_require_experiment(ctx, name))


@router.get("/{name}/runs", response_model=List[RunOut])
def list_runs(name: str, ctx: MLOpsContext = Depends(get_context)) -> List[RunOut]:
    """List the runs of one experiment, oldest first."""
    experiment = _require_experiment(ctx, name)
    return [to_run_schema(r) for r in ctx.lifecycle.list_runs(experiment.id)]
