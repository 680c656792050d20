"""Experiment, run, metric and model-artifact tracking for training scripts."""

from mlops.builder import MLOpsBuilder
from mlops.context import MLOpsContext
from mlops.errors import MLOpsError, NotFound, StorageError, ValidationError

__all__ = ["MLOpsBuilder", "MLOpsContext", "MLOpsError", "NotFound", "StorageError", "ValidationError"]

__version__ = "0.1.0"
