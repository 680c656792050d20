from __future__ import annotations

from sqlalchemy import JSON, Column, ForeignKey, Integer, UniqueConstraint, Uuid

from mlops.db.base import Base


class ConfusionMatrixRow(Base):
    __tablename__ = "confusion_matrices"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Uuid, ForeignKey("runs.id", ondelete="CASCADE"), nullable=False)
    per_class_precision = Column(JSON, nullable=False)
    per_class_recall = Column(JSON, nullable=False)
    counts = Column(JSON, nullable=False)
    number_of_classes = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("run_id", name="uq_confusion_matrix_run"),
    )
