from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4


def new_version() -> str:
    """Return a sortable, collision-resistant version marker for one upload."""
    return f"{datetime.now(tz=timezone.utc):%Y%m%dT%H%M%S%fZ}-{uuid4().hex[:8]}"


def artifact_key(run_id: UUID, version: str, file_name: str) -> str:
    return f"{run_id}/{version}/{file_name}"
