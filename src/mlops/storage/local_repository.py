from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union
from uuid import UUID

from mlops.entities import ArtifactReference
from mlops.errors import NotFound, StorageError
from mlops.storage.keys import artifact_key, new_version
from mlops.storage.types import ModelRepository

logger = logging.getLogger(__name__)


class LocalFileModelRepository(ModelRepository):
    """Store model files under a directory tree: ``<root>/<run_id>/<version>/<file name>``."""

    def __init__(self, root_dir: Union[str, Path] = Path("resources/models")) -> None:
        self.root_dir = Path(root_dir)

    def upload_model(self, run_id: UUID, file_path: Union[str, Path]) -> ArtifactReference:
        source = Path(file_path)
        version = new_version()
        key = artifact_key(run_id, version, source.name)
        target = self._path_for(key)
        try:
            with open(source, "rb") as src:
                target.parent.mkdir(parents=True, exist_ok=True)
                with open(target, "wb") as dst:
                    shutil.copyfileobj(src, dst)
        except OSError as exc:
            self._discard(target)
            raise StorageError(f"Failed to store model {source} for run {run_id}: {exc}") from exc
        logger.info("Stored model %s as %s", source, target)
        return ArtifactReference(run_id=run_id, key=key, version=version)

    def download_model(
        self, reference: ArtifactReference, destination: Optional[Union[str, Path]] = None
    ) -> Path:
        stored = self._path_for(reference.key)
        if not stored.is_file():
            raise NotFound(f"artifact {reference.key} does not exist")
        target = Path(destination) if destination else Path(tempfile.mkdtemp(prefix="mlops-")) / stored.name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(stored, target)
        except OSError as exc:
            raise StorageError(f"Failed to read model {reference.key}: {exc}") from exc
        return target

    def list_models(self, run_id: UUID) -> List[ArtifactReference]:
        run_dir = self.root_dir / str(run_id)
        if not run_dir.is_dir():
            return []
        references = []
        try:
            # version markers start with a UTC timestamp, so name order is upload order
            for version_dir in sorted(p for p in run_dir.iterdir() if p.is_dir()):
                for path in sorted(p for p in version_dir.iterdir() if p.is_file()):
                    references.append(
                        ArtifactReference(
                            run_id=run_id,
                            key=artifact_key(run_id, version_dir.name, path.name),
                            version=version_dir.name,
                        )
                    )
        except OSError as exc:
            raise StorageError(f"Failed to list models of run {run_id}: {exc}") from exc
        return references

    def _discard(self, target: Path) -> None:
        """Remove a partial upload and the version/run directories it left empty."""
        with contextlib.suppress(OSError):
            target.unlink(missing_ok=True)
        for directory in (target.parent, target.parent.parent):
            try:
                directory.rmdir()
            except OSError:
                break

    def _path_for(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or ".." in parts or PurePosixPath(key).is_absolute():
            raise StorageError(f"Invalid artifact key {key!r}")
        return self.root_dir.joinpath(*parts)
