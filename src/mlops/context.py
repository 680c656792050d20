from __future__ import annotations

from mlops.catalogs import DataCatalog, EvaluationCatalog, LifeCycleCatalog, ModelCatalog, TrainingCatalog
from mlops.storage.types import MetadataStore, ModelRepository


class MLOpsContext:
    """Single handle exposing the tracking catalogs.

    Usage:
        ctx = MLOpsContext(SqlMetadataStore.from_url(url), LocalFileModelRepository())
        run_id = ctx.lifecycle.create_run("Titanic Survival Predictor")
        ctx.evaluation.log_metric(run_id, "F1Score", 0.78)
    """

    def __init__(self, metadata_store: MetadataStore, model_repository: ModelRepository) -> None:
        if metadata_store is None:
            raise ValueError("metadata_store is required")
        if model_repository is None:
            raise ValueError("model_repository is required")
        self.metadata_store = metadata_store
        self.model_repository = model_repository
        self.lifecycle = LifeCycleCatalog(metadata_store)
        self.training = TrainingCatalog(metadata_store)
        self.evaluation = EvaluationCatalog(metadata_store)
        self.data = DataCatalog(metadata_store)
        self.model = ModelCatalog(model_repository)
