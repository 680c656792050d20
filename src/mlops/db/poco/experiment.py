from __future__ import annotations

from sqlalchemy import Column, String, UniqueConstraint, Uuid

from mlops.db.base import Base


class ExperimentRow(Base):
    __tablename__ = "experiments"

    id = Column(Uuid, primary_key=True)
    name = Column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_experiment_name"),
    )
