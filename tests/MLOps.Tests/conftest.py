"""Shared fixtures: every store-level test runs against each metadata backend."""
from __future__ import annotations

from uuid import uuid4

import mongomock
import pytest

from mlops.context import MLOpsContext
from mlops.storage.local_repository import LocalFileModelRepository
from mlops.storage.memory import InMemoryMetadataStore
from mlops.storage.mongo_store import MongoMetadataStore
from mlops.storage.sql_store import SqlMetadataStore


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'mlops.sqlite'}"


@pytest.fixture
def sql_store(sqlite_url):
    store = SqlMetadataStore.from_url(sqlite_url, create_schema=True)
    yield store
    store.db.dispose()


@pytest.fixture
def mongo_store():
    # a fresh database per test; mongomock clients may share one server store
    return MongoMetadataStore(mongomock.MongoClient()[f"mlops_{uuid4().hex}"])


@pytest.fixture(params=["memory", "sqlite", "mongo"])
def store(request):
    if request.param == "memory":
        return InMemoryMetadataStore()
    if request.param == "mongo":
        return request.getfixturevalue("mongo_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def model_dir(tmp_path):
    return tmp_path / "models"


@pytest.fixture
def ctx(store, model_dir):
    return MLOpsContext(store, LocalFileModelRepository(model_dir))
