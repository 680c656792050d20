"""Database connection helper using SQLAlchemy and Alembic.

Provides a lightweight wrapper to create engine and sessions, test
connectivity, create the tracking schema for embedded databases, and
optionally read the Alembic revision if present.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session

from mlops.config import get_database_url
from mlops.db.base import Base


class DbConn:
    """Simple database connection manager.

    Usage:
        db = DbConn("sqlite:///mlops.sqlite")
        db.create_schema()
        with db.session_scope() as s:
            s.execute(text("SELECT 1"))
    """

    def __init__(self, db_url: Optional[str] = None, echo: bool = False) -> None:
        url = db_url or get_database_url()
        if not url:
            raise ValueError("Database URL not configured. Check resources/.env or MLOPS_DATABASE_URL.")

        engine_kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            # writers wait for the file lock instead of failing immediately
            engine_kwargs["connect_args"] = {"timeout": 30}
        self._url = url
        self._engine: Engine = create_engine(url, **engine_kwargs)
        self._Session = sessionmaker(bind=self._engine, autoflush=False, autocommit=False, expire_on_commit=False)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def url(self) -> str:
        return self._url

    def get_session(self) -> Session:
        return self._Session()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create all tracking tables that do not exist yet.

        Intended for embedded databases and tests; managed databases are
        migrated with Alembic instead.
        """
        from mlops.db import poco  # noqa: F401  # ensure models are imported

        Base.metadata.create_all(self._engine)

    def dispose(self) -> None:
        self._engine.dispose()

    def test_connection(self) -> bool:
        """Try connecting and executing a trivial statement."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False

    def get_alembic_revision(self) -> Optional[str]:
        """Return current Alembic revision if alembic_version table exists.

        Returns None when the table is missing or unreadable.
        """
        try:
            with self.engine.connect() as conn:
                result = conn.execute(text("SELECT version_num FROM alembic_version LIMIT 1"))
                row = result.first()
                return row[0] if row else None
        except SQLAlchemyError:
            return None
