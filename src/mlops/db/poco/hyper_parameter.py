from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Text, Uuid

from mlops.db.base import Base


class HyperParameterRow(Base):
    __tablename__ = "hyper_parameters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Uuid, ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    value = Column(Text, nullable=False)
