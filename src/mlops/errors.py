"""Error taxonomy shared by stores, repositories and catalogs."""
from __future__ import annotations


class MLOpsError(RuntimeError):
    """Base class for tracking failures."""


class NotFound(MLOpsError):
    """Raised when a referenced experiment, run or artifact does not exist."""


class ValidationError(MLOpsError, ValueError):
    """Raised when a caller supplies an empty or malformed identifier or name."""


class StorageError(MLOpsError):
    """Raised when the metadata store or model repository backend fails.

    The backend's native exception is chained as ``__cause__``.
    """
