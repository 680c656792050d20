from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union
from uuid import UUID

from mlops.catalogs.validation import require_id
from mlops.entities import ArtifactReference
from mlops.errors import ValidationError
from mlops.storage.types import ModelRepository


class ModelCatalog:
    """Move trained-model files in and out of the model repository."""

    def __init__(self, model_repository: ModelRepository) -> None:
        self._model_repository = model_repository

    def upload(self, run_id: Union[UUID, str], file_path: Union[str, Path]) -> ArtifactReference:
        rid = require_id(run_id)
        if not file_path or not str(file_path).strip():
            raise ValidationError("file_path must not be empty")
        return self._model_repository.upload_model(rid, file_path)

    def download(
        self, reference: ArtifactReference, destination: Optional[Union[str, Path]] = None
    ) -> Path:
        if not isinstance(reference, ArtifactReference) or not reference.key:
            raise ValidationError(f"expected an ArtifactReference with a key, got {reference!r}")
        return self._model_repository.download_model(reference, destination)

    def list_models(self, run_id: Union[UUID, str]) -> List[ArtifactReference]:
        """Return every artifact uploaded for the run, oldest first."""
        return self._model_repository.list_models(require_id(run_id))
