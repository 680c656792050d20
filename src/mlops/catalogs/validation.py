from __future__ import annotations

from typing import Any
from uuid import UUID

from mlops.errors import ValidationError


def require_id(value: Any, label: str = "run_id") -> UUID:
    """Return ``value`` as a UUID or raise ``ValidationError``.

    Accepts ``UUID`` instances and their string form.
    """
    if isinstance(value, UUID):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return UUID(value.strip())
        except ValueError as exc:
            raise ValidationError(f"{label} {value!r} is not a valid identifier") from exc
    raise ValidationError(f"{label} must be a non-empty identifier, got {value!r}")


def require_name(value: Any, label: str = "name") -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} must be a non-empty string, got {value!r}")
    return value
