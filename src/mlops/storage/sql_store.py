"""Metadata store backed by any SQLAlchemy-supported relational database.

The embedded SQLite file and a networked PostgreSQL server are both
reached through :class:`~mlops.db.db_conn.DbConn`; only the URL differs.
Each call opens its own session, so one store instance can be shared by
many threads.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, List, Mapping, Optional, Type, TypeVar
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from mlops.db.db_conn import DbConn
from mlops.db.poco import (
    ConfusionMatrixRow,
    DataColumnRow,
    DataSchemaRow,
    ExperimentRow,
    HyperParameterRow,
    MetricRow,
    RunRow,
)
from mlops.entities import (
    ConfusionMatrix,
    DataColumn,
    DataSchema,
    Experiment,
    HyperParameter,
    Metric,
    Run,
)
from mlops.errors import NotFound, StorageError
from mlops.storage.types import MetadataStore

logger = logging.getLogger(__name__)

_RunScopedRow = TypeVar("_RunScopedRow", ConfusionMatrixRow, DataSchemaRow)


def _as_utc(ts: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


class SqlMetadataStore(MetadataStore):
    """Persist experiments, runs and logged facts through SQLAlchemy."""

    def __init__(self, db: DbConn) -> None:
        self._db = db

    @classmethod
    def from_url(cls, db_url: str, create_schema: bool = False, echo: bool = False) -> "SqlMetadataStore":
        db = DbConn(db_url=db_url, echo=echo)
        if create_schema:
            db.create_schema()
        return cls(db)

    @property
    def db(self) -> DbConn:
        return self._db

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._db.session_scope() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(f"Metadata store operation failed: {exc}") from exc

    # ----- experiments -----

    def create_experiment(self, name: str) -> UUID:
        try:
            with self._db.session_scope() as session:
                existing = self._find_experiment(session, name)
                if existing is not None:
                    return existing.id
                row = ExperimentRow(id=uuid4(), name=name)
                session.add(row)
                session.flush()
                logger.info("Created experiment %r (%s)", name, row.id)
                return row.id
        except IntegrityError:
            # another writer inserted the same name first; the unique constraint decided
            logger.debug("Experiment %r created concurrently, reading the stored id", name)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to create experiment {name!r}: {exc}") from exc

        with self._session() as session:
            existing = self._find_experiment(session, name)
            if existing is None:
                raise StorageError(f"Experiment {name!r} violated uniqueness but cannot be read back")
            return existing.id

    def get_experiment(self, name: str) -> Optional[Experiment]:
        with self._session() as session:
            row = self._find_experiment(session, name)
            return Experiment(id=row.id, name=row.name) if row is not None else None

    def list_experiments(self) -> List[Experiment]:
        with self._session() as session:
            rows = session.scalars(select(ExperimentRow).order_by(ExperimentRow.name.asc())).all()
            return [Experiment(id=r.id, name=r.name) for r in rows]

    # ----- runs -----

    def create_run(self, experiment_id: UUID) -> UUID:
        with self._session() as session:
            if session.get(ExperimentRow, experiment_id) is None:
                raise NotFound(f"experiment {experiment_id} does not exist")
            row = RunRow(id=uuid4(), experiment_id=experiment_id, created_at=datetime.now(tz=timezone.utc))
            session.add(row)
            session.flush()
            logger.info("Created run %s in experiment %s", row.id, experiment_id)
            return row.id

    def get_run(self, run_id: UUID) -> Optional[Run]:
        with self._session() as session:
            row = session.get(RunRow, run_id)
            return self._to_run(row) if row is not None else None

    def list_runs(self, experiment_id: UUID) -> List[Run]:
        with self._session() as session:
            stmt = (
                select(RunRow)
                .where(RunRow.experiment_id == experiment_id)
                .order_by(RunRow.created_at.asc())
            )
            return [self._to_run(r) for r in session.scalars(stmt).all()]

    def set_training_time(self, run_id: UUID, duration: timedelta) -> None:
        with self._session() as session:
            row = self._require_run(session, run_id)
            row.training_time = duration

    # ----- metrics & hyperparameters -----

    def log_metric(self, run_id: UUID, name: str, value: float) -> None:
        with self._session() as session:
            self._require_run(session, run_id)
            session.add(
                MetricRow(run_id=run_id, name=name, value=float(value), logged_at=datetime.now(tz=timezone.utc))
            )
        logger.debug("Logged metric %s=%s on run %s", name, value, run_id)

    def get_metrics(self, run_id: UUID) -> List[Metric]:
        with self._session() as session:
            stmt = select(MetricRow).where(MetricRow.run_id == run_id).order_by(MetricRow.id.asc())
            return [
                Metric(run_id=r.run_id, name=r.name, value=r.value, logged_at=_as_utc(r.logged_at))
                for r in session.scalars(stmt).all()
            ]

    def log_hyper_parameters(self, run_id: UUID, parameters: Mapping[str, str]) -> None:
        with self._session() as session:
            self._require_run(session, run_id)
            session.add_all(
                [HyperParameterRow(run_id=run_id, name=name, value=str(value)) for name, value in parameters.items()]
            )
        logger.debug("Logged %d hyperparameters on run %s", len(parameters), run_id)

    def get_hyper_parameters(self, run_id: UUID) -> List[HyperParameter]:
        with self._session() as session:
            stmt = (
                select(HyperParameterRow)
                .where(HyperParameterRow.run_id == run_id)
                .order_by(HyperParameterRow.id.asc())
            )
            return [HyperParameter(run_id=r.run_id, name=r.name, value=r.value) for r in session.scalars(stmt).all()]

    # ----- confusion matrix -----

    def log_confusion_matrix(self, run_id: UUID, matrix: ConfusionMatrix) -> None:
        def apply(row: ConfusionMatrixRow) -> None:
            row.per_class_precision = list(matrix.per_class_precision)
            row.per_class_recall = list(matrix.per_class_recall)
            row.counts = [list(r) for r in matrix.counts]
            row.number_of_classes = matrix.number_of_classes

        self._upsert_for_run(ConfusionMatrixRow, run_id, apply)

    def get_confusion_matrix(self, run_id: UUID) -> Optional[ConfusionMatrix]:
        with self._session() as session:
            row = session.scalars(select(ConfusionMatrixRow).where(ConfusionMatrixRow.run_id == run_id)).first()
            if row is None:
                return None
            return ConfusionMatrix(
                per_class_precision=tuple(row.per_class_precision),
                per_class_recall=tuple(row.per_class_recall),
                counts=tuple(tuple(r) for r in row.counts),
                number_of_classes=row.number_of_classes,
                run_id=row.run_id,
            )

    # ----- data schema -----

    def log_data_schema(self, run_id: UUID, schema: DataSchema) -> None:
        def apply(row: DataSchemaRow) -> None:
            row.column_count = schema.column_count
            row.columns = [
                DataColumnRow(position=idx, name=col.name, type=col.type) for idx, col in enumerate(schema.columns)
            ]

        self._upsert_for_run(DataSchemaRow, run_id, apply)

    def get_data_schema(self, run_id: UUID) -> Optional[DataSchema]:
        with self._session() as session:
            row = session.scalars(select(DataSchemaRow).where(DataSchemaRow.run_id == run_id)).first()
            if row is None:
                return None
            return DataSchema(
                column_count=row.column_count,
                columns=tuple(DataColumn(name=c.name, type=c.type) for c in row.columns),
                run_id=row.run_id,
            )

    # ----- helpers -----

    def _upsert_for_run(
        self, row_type: Type[_RunScopedRow], run_id: UUID, apply: Callable[[_RunScopedRow], None]
    ) -> None:
        """Insert or update the single ``row_type`` row owned by ``run_id``.

        A concurrent writer may insert the row between our read and our
        insert; the unique constraint on ``run_id`` rejects the loser, which
        then applies its values to the stored row instead.
        """
        try:
            with self._db.session_scope() as session:
                self._apply_to_run_row(session, row_type, run_id, apply)
            return
        except IntegrityError:
            logger.debug("%s for run %s inserted concurrently, updating the stored row", row_type.__tablename__, run_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write {row_type.__tablename__} for run {run_id}: {exc}") from exc

        with self._session() as session:
            self._apply_to_run_row(session, row_type, run_id, apply)

    @classmethod
    def _apply_to_run_row(
        cls, session: Session, row_type: Type[_RunScopedRow], run_id: UUID, apply: Callable[[_RunScopedRow], None]
    ) -> None:
        cls._require_run(session, run_id)
        row = session.scalars(select(row_type).where(row_type.run_id == run_id)).first()
        if row is None:
            row = row_type(run_id=run_id)
            session.add(row)
        apply(row)
        session.flush()

    @staticmethod
    def _find_experiment(session: Session, name: str) -> Optional[ExperimentRow]:
        return session.scalars(select(ExperimentRow).where(ExperimentRow.name == name)).first()

    @staticmethod
    def _require_run(session: Session, run_id: UUID) -> RunRow:
        row = session.get(RunRow, run_id)
        if row is None:
            raise NotFound(f"run {run_id} does not exist")
        return row

    @staticmethod
    def _to_run(row: RunRow) -> Run:
        return Run(
            id=row.id,
            experiment_id=row.experiment_id,
            created_at=_as_utc(row.created_at),
            training_time=row.training_time,
        )
