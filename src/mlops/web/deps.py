"""Shared FastAPI dependencies (tracking context)."""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException

from mlops.builder import MLOpsBuilder
from mlops.context import MLOpsContext
from mlops.errors import StorageError

_context: Optional[MLOpsContext] = None


def get_context() -> MLOpsContext:
    """Provide the process-wide tracking context (lazy init from environment).

    The API only reads, so it never creates tables; the database must already
    carry the schema (Alembic or ``mlops-db --create-schema``).
    """
    global _context

    if _context is None:
        try:
            _context = MLOpsBuilder.from_env(create_schema=False).build()
        except (ValueError, StorageError) as exc:
            raise HTTPException(status_code=503, detail=str(exc))
    return _context
