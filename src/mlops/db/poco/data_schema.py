from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from mlops.db.base import Base


class DataSchemaRow(Base):
    __tablename__ = "data_schemas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(Uuid, ForeignKey("runs.id", ondelete="CASCADE"), nullable=False)
    column_count = Column(Integer, nullable=False)

    columns = relationship(
        "DataColumnRow",
        back_populates="schema",
        cascade="all, delete-orphan",
        order_by="DataColumnRow.position",
    )

    __table_args__ = (
        UniqueConstraint("run_id", name="uq_data_schema_run"),
    )


class DataColumnRow(Base):
    __tablename__ = "data_columns"

    id = Column(Integer, primary_key=True, autoincrement=True)
    schema_id = Column(Integer, ForeignKey("data_schemas.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    name = Column(String(200), nullable=False)
    type = Column(String(50), nullable=False)

    schema = relationship("DataSchemaRow", back_populates="columns")

    __table_args__ = (
        Index("ix_data_columns_schema_pos", "schema_id", "position"),
    )
