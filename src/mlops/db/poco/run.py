from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Interval, Uuid

from mlops.db.base import Base


class RunRow(Base):
    __tablename__ = "runs"

    id = Column(Uuid, primary_key=True)
    experiment_id = Column(Uuid, ForeignKey("experiments.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    training_time = Column(Interval, nullable=True)

    __table_args__ = (
        Index("ix_runs_experiment_created", "experiment_id", "created_at"),
    )
