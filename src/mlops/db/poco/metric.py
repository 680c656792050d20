from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Uuid

from mlops.db.base import Base


class MetricRow(Base):
    __tablename__ = "metrics"

    id = Column(Integer, primary_key=True, autoincrement=True)  # preserves logging order
    run_id = Column(Uuid, ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    value = Column(Float, nullable=False)
    logged_at = Column(DateTime(timezone=True), nullable=False)
