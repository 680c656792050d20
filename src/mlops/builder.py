"""Fluent composition of an :class:`MLOpsContext` from concrete backends."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from mlops.config import (
    get_database_url,
    get_model_repository_config,
    get_mongo_database_name,
    is_document_database,
    is_embedded_database,
    load_env_file,
)
from mlops.context import MLOpsContext
from mlops.storage.local_repository import LocalFileModelRepository
from mlops.storage.mongo_store import MongoMetadataStore
from mlops.storage.s3_repository import S3ModelRepository
from mlops.storage.sql_store import SqlMetadataStore
from mlops.storage.types import MetadataStore, ModelRepository

logger = logging.getLogger(__name__)

REPOSITORY_KINDS = ("local", "s3", "r2")


class MLOpsBuilder:
    """Select one metadata store and one model repository, then ``build()``.

    Usage:
        ctx = (
            MLOpsBuilder()
            .use_sqlite("mlops.sqlite")
            .use_local_repository("resources/models")
            .build()
        )
    """

    def __init__(self) -> None:
        self._metadata_store: Optional[MetadataStore] = None
        self._model_repository: Optional[ModelRepository] = None

    # ----- metadata store -----

    def use_metadata_store(self, metadata_store: MetadataStore) -> "MLOpsBuilder":
        self._metadata_store = metadata_store
        return self

    def use_database(self, db_url: str, create_schema: bool = False) -> "MLOpsBuilder":
        """Use a relational metadata store at ``db_url`` (e.g. a PostgreSQL DSN)."""
        return self.use_metadata_store(SqlMetadataStore.from_url(db_url, create_schema=create_schema))

    def use_sqlite(self, path: Union[str, Path] = "mlops.sqlite") -> "MLOpsBuilder":
        """Use an embedded SQLite file; the schema is created on first use."""
        return self.use_database(f"sqlite:///{Path(path)}", create_schema=True)

    def use_mongo(self, mongo_url: str, database: str = "mlops") -> "MLOpsBuilder":
        """Use a MongoDB document store; collections and indexes are created on first use."""
        return self.use_metadata_store(MongoMetadataStore.from_url(mongo_url, database=database))

    # ----- model repository -----

    def use_model_repository(self, model_repository: ModelRepository) -> "MLOpsBuilder":
        self._model_repository = model_repository
        return self

    def use_local_repository(self, root_dir: Union[str, Path] = Path("resources/models")) -> "MLOpsBuilder":
        return self.use_model_repository(LocalFileModelRepository(root_dir))

    def use_s3_repository(
        self,
        bucket: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        region_name: Optional[str] = None,
        prefix: str = "models",
    ) -> "MLOpsBuilder":
        return self.use_model_repository(
            S3ModelRepository.for_aws(bucket, access_key_id, secret_access_key, region_name, prefix=prefix)
        )

    def use_r2_repository(
        self,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket: str,
        prefix: str = "models",
    ) -> "MLOpsBuilder":
        return self.use_model_repository(
            S3ModelRepository.for_r2(account_id, access_key_id, secret_access_key, bucket, prefix=prefix)
        )

    # ----- build -----

    def build(self) -> MLOpsContext:
        if self._metadata_store is None:
            raise ValueError("No metadata store configured. Call use_database/use_sqlite/use_mongo/use_metadata_store.")
        if self._model_repository is None:
            raise ValueError("No model repository configured. Call use_local_repository/use_s3_repository.")
        return MLOpsContext(self._metadata_store, self._model_repository)

    @classmethod
    def from_env(cls, create_schema: Optional[bool] = None) -> "MLOpsBuilder":
        """Configure both backends from environment variables (see ``mlops.config``).

        Tables are created only for embedded SQLite files unless
        ``create_schema`` says otherwise; networked databases are migrated
        with Alembic.
        """
        load_env_file()
        db_url = get_database_url()
        if is_document_database(db_url):
            builder = cls().use_mongo(db_url, get_mongo_database_name())
        else:
            if create_schema is None:
                create_schema = is_embedded_database(db_url)
            builder = cls().use_database(db_url, create_schema=create_schema)

        cfg = get_model_repository_config()
        kind = cfg["MLOPS_MODEL_REPOSITORY"]
        if kind == "local":
            builder.use_local_repository(cfg["MLOPS_MODEL_DIR"] or "resources/models")
        elif kind == "s3":
            builder.use_s3_repository(
                cfg["S3_BUCKET_NAME"] or "",
                cfg["AWS_ACCESS_KEY_ID"],
                cfg["AWS_SECRET_ACCESS_KEY"],
                cfg["AWS_REGION"],
                prefix=cfg["MLOPS_MODEL_PREFIX"] or "",
            )
        elif kind == "r2":
            builder.use_r2_repository(
                cfg["R2_ACCOUNT_ID"] or "",
                cfg["R2_ACCESS_KEY_ID"] or "",
                cfg["R2_SECRET_ACCESS_KEY"] or "",
                cfg["R2_BUCKET_NAME"] or "",
                prefix=cfg["MLOPS_MODEL_PREFIX"] or "",
            )
        else:
            raise ValueError(f"Unknown model repository '{kind}'. Available: {', '.join(REPOSITORY_KINDS)}")
        logger.info("Configured %s model repository", kind)
        return builder
