from __future__ import annotations

from datetime import timedelta
from typing import List, Optional, Union
from uuid import UUID

from mlops.catalogs.validation import require_id, require_name
from mlops.entities import Experiment, Run
from mlops.errors import ValidationError
from mlops.storage.types import MetadataStore


class LifeCycleCatalog:
    """Create and look up experiments and runs."""

    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def create_experiment(self, name: str) -> UUID:
        """Return the id of the experiment called ``name``, creating it if needed."""
        return self._metadata_store.create_experiment(require_name(name, "experiment name"))

    def create_run(self, experiment: Union[UUID, str]) -> UUID:
        """
        Create a run.

        Parameters:
            experiment: Either the UUID of an existing experiment, or an
                experiment name. A name is resolved with ``create_experiment``
                first, so the experiment is created on demand. The two steps
                are separate store calls; if the second fails the experiment
                stays and the call can simply be repeated.

        Raises:
            NotFound: When a UUID does not reference an existing experiment.
        """
        if isinstance(experiment, UUID):
            return self._metadata_store.create_run(experiment)
        experiment_id = self.create_experiment(experiment)
        return self._metadata_store.create_run(experiment_id)

    def set_training_time(self, run_id: Union[UUID, str], training_time: timedelta) -> None:
        if not isinstance(training_time, timedelta):
            raise ValidationError(f"training_time must be a timedelta, got {type(training_time).__name__}")
        if training_time < timedelta(0):
            raise ValidationError("training_time cannot be negative")
        self._metadata_store.set_training_time(require_id(run_id), training_time)

    def get_experiment(self, name: str) -> Optional[Experiment]:
        return self._metadata_store.get_experiment(require_name(name, "experiment name"))

    def list_experiments(self) -> List[Experiment]:
        return self._metadata_store.list_experiments()

    def get_run(self, run_id: Union[UUID, str]) -> Optional[Run]:
        return self._metadata_store.get_run(require_id(run_id))

    def list_runs(self, experiment_id: Union[UUID, str]) -> List[Run]:
        return self._metadata_store.list_runs(require_id(experiment_id, "experiment_id"))
