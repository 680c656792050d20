from __future__ import annotations

from typing import Any, Dict, List, Union
from uuid import UUID

from mlops.catalogs.validation import require_id
from mlops.entities import HyperParameter
from mlops.errors import ValidationError
from mlops.extraction import extract_hyper_parameters
from mlops.storage.types import MetadataStore


class TrainingCatalog:
    """Record the configuration a run was trained with."""

    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def log_hyper_parameters(self, run_id: Union[UUID, str], parameters: Any) -> Dict[str, str]:
        """
        Log hyperparameters against a run.

        Parameters:
            run_id: The run to log against.
            parameters: A mapping of name to value, or any trainer/options
                object whose numeric public attributes are the
                hyperparameters (see ``mlops.extraction``).

        Returns:
            The name -> text pairs that were logged.
        """
        rid = require_id(run_id)
        if parameters is None:
            raise ValidationError("parameters must not be None")
        selected = extract_hyper_parameters(parameters)
        self._metadata_store.log_hyper_parameters(rid, selected)
        return selected

    def get_hyper_parameters(self, run_id: Union[UUID, str]) -> List[HyperParameter]:
        return self._metadata_store.get_hyper_parameters(require_id(run_id))
