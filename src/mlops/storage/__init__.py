"""Metadata store and model repository contracts with their backends."""

from mlops.storage.local_repository import LocalFileModelRepository
from mlops.storage.memory import InMemoryMetadataStore
from mlops.storage.mongo_store import MongoMetadataStore
from mlops.storage.s3_repository import S3ModelRepository
from mlops.storage.sql_store import SqlMetadataStore
from mlops.storage.types import MetadataStore, ModelRepository

__all__ = [
    "InMemoryMetadataStore",
    "LocalFileModelRepository",
    "MetadataStore",
    "MongoMetadataStore",
    "ModelRepository",
    "S3ModelRepository",
    "SqlMetadataStore",
]
