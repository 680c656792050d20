"""Catalog facades grouping tracking operations by concern."""

from mlops.catalogs.data import DataCatalog
from mlops.catalogs.evaluation import EvaluationCatalog
from mlops.catalogs.lifecycle import LifeCycleCatalog
from mlops.catalogs.model import ModelCatalog
from mlops.catalogs.training import TrainingCatalog

__all__ = ["DataCatalog", "EvaluationCatalog", "LifeCycleCatalog", "ModelCatalog", "TrainingCatalog"]
