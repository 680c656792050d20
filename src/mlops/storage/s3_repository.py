"""Model repository on S3-compatible object storage (AWS S3, Cloudflare R2).

Objects are written to ``<prefix>/<run_id>/<version>/<file name>`` so every
upload lands under a fresh key; the bucket is never asked to overwrite.
"""
from __future__ import annotations

import logging
import mimetypes
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union
from uuid import UUID

import boto3
from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError

from mlops.entities import ArtifactReference
from mlops.errors import NotFound, StorageError
from mlops.storage.keys import artifact_key, new_version
from mlops.storage.types import ModelRepository

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def get_content_type(filepath: Path) -> str:
    """Get MIME type for a file."""
    mime_type, _ = mimetypes.guess_type(str(filepath))
    return mime_type or "application/octet-stream"


class S3ModelRepository(ModelRepository):
    """Upload and download model artifacts through a boto3 S3 client.

    The client is injected so tests can pass a stub and R2 can reuse the
    same code through its S3-compatible endpoint.
    """

    def __init__(self, client: Any, bucket: str, prefix: str = "models") -> None:
        if not bucket:
            raise ValueError("S3 bucket name is required")
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")

    @classmethod
    def for_aws(
        cls,
        bucket: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region_name: Optional[str] = None,
        prefix: str = "models",
    ) -> "S3ModelRepository":
        """Create a repository on AWS S3; missing credentials fall back to the boto3 default chain."""
        client = boto3.client(
            "s3",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name=region_name,
        )
        return cls(client, bucket, prefix=prefix)

    @classmethod
    def for_r2(
        cls,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket: str,
        prefix: str = "models",
    ) -> "S3ModelRepository":
        """Create a repository on Cloudflare R2."""
        missing = [
            label
            for label, value in (
                ("R2_ACCOUNT_ID", account_id),
                ("R2_ACCESS_KEY_ID", access_key_id),
                ("R2_SECRET_ACCESS_KEY", secret_access_key),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing R2 configuration: {', '.join(missing)}")

        # R2 uses S3-compatible API with a custom endpoint
        client = boto3.client(
            "s3",
            endpoint_url=f"https://{account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )
        return cls(client, bucket, prefix=prefix)

    def upload_model(self, run_id: UUID, file_path: Union[str, Path]) -> ArtifactReference:
        source = Path(file_path)
        version = new_version()
        key = artifact_key(run_id, version, source.name)
        object_key = self._object_key(key)
        try:
            with open(source, "rb") as f:
                # managed transfer: multipart for large files, never buffered whole
                self.client.upload_fileobj(
                    f,
                    self.bucket,
                    object_key,
                    ExtraArgs={
                        "ContentType": get_content_type(source),
                        "Metadata": {"run_id": str(run_id), "version": version},
                    },
                )
        except (ClientError, BotoCoreError, Boto3Error, OSError) as exc:
            raise StorageError(f"Failed to upload {source} to s3://{self.bucket}/{object_key}: {exc}") from exc
        logger.info("Uploaded model %s to s3://%s/%s", source, self.bucket, object_key)
        return ArtifactReference(run_id=run_id, key=key, version=version)

    def download_model(
        self, reference: ArtifactReference, destination: Optional[Union[str, Path]] = None
    ) -> Path:
        object_key = self._object_key(reference.key)
        file_name = reference.key.rsplit("/", 1)[-1]
        target = Path(destination) if destination else Path(tempfile.mkdtemp(prefix="mlops-")) / file_name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self.client.download_file(self.bucket, object_key, str(target))
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_KEY_CODES:
                raise NotFound(f"artifact s3://{self.bucket}/{object_key} does not exist") from exc
            raise StorageError(f"Failed to download s3://{self.bucket}/{object_key}: {exc}") from exc
        except (BotoCoreError, Boto3Error, OSError) as exc:
            raise StorageError(f"Failed to download s3://{self.bucket}/{object_key}: {exc}") from exc
        logger.debug("Downloaded s3://%s/%s to %s", self.bucket, object_key, target)
        return target

    def list_models(self, run_id: UUID) -> List[ArtifactReference]:
        run_prefix = self._object_key(f"{run_id}/")
        strip = len(self._object_key(""))
        keys = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=run_prefix):
                keys.extend(obj["Key"][strip:] for obj in page.get("Contents", []))
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to list s3://{self.bucket}/{run_prefix}: {exc}") from exc

        references = []
        for key in sorted(keys):
            parts = key.split("/")
            if len(parts) == 3:
                references.append(ArtifactReference(run_id=run_id, key=key, version=parts[1]))
        return references

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}/{key}" if self.prefix else key
