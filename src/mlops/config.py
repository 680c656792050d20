"""Utility helpers for loading project configuration.

This module is the single source of truth for environment-driven
configuration such as the metadata database and the model repository
backend.

Usage:
- Call ``load_env_file()`` once at startup to load ``resources/.env``.
- Use ``get_env`` for simple lookups.
- Use the convenience helpers like ``get_database_url`` and
  ``get_model_repository_config`` for normalized access.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import load_dotenv

DEFAULT_SQLITE_URL = "sqlite:///mlops.sqlite"
DEFAULT_MODEL_DIR = "resources/models"
DEFAULT_MONGO_DATABASE = "mlops"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_env_file(env_path: Optional[Union[str, Path]] = None) -> None:
    """
    Load environment variables from an .env file.

    Parameters:
        env_path: Optional path to the .env file. Defaults to resources/.env.
    """
    env_file = Path(env_path or "resources/.env")
    if env_file.exists():
        load_dotenv(env_file)


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Fetch an environment variable with an optional default."""
    return os.getenv(name, default)


# ----- Metadata store helpers -----

def get_database_url() -> str:
    """Return the connection URL of the metadata store.

    Resolution order:
    - ``MLOPS_DATABASE_URL``
    - ``DATABASE_URL``
    - a PostgreSQL DSN built from DB_HOST, DB_PORT, DB_NAME, DB_USER, DB_PASSWORD
    - the embedded SQLite file ``mlops.sqlite`` in the working directory

    A ``mongodb://`` URL selects the document store; anything else is
    handed to SQLAlchemy.
    """
    db_url = get_env("MLOPS_DATABASE_URL") or get_env("DATABASE_URL")
    if db_url:
        return db_url

    host = get_env("DB_HOST")
    port = get_env("DB_PORT") or "5432"
    name = get_env("DB_NAME")
    user = get_env("DB_USER")
    password = get_env("DB_PASSWORD")

    if not (host and name and user and password):
        return DEFAULT_SQLITE_URL

    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}"


def is_embedded_database(db_url: str) -> bool:
    """True for SQLite URLs, whose tables may be created on first use."""
    return db_url.startswith("sqlite")


def is_document_database(db_url: str) -> bool:
    """True for MongoDB connection strings (``mongodb://`` or ``mongodb+srv://``)."""
    return db_url.startswith("mongodb")


def get_mongo_database_name() -> str:
    return get_env("MLOPS_MONGO_DATABASE", DEFAULT_MONGO_DATABASE) or DEFAULT_MONGO_DATABASE


# ----- Model repository helpers -----

def get_model_repository_config() -> Dict[str, Optional[str]]:
    """Return model repository configuration gathered from environment.

    Keys:
    - MLOPS_MODEL_REPOSITORY ("local", "s3" or "r2")
    - MLOPS_MODEL_DIR (local backend root)
    - MLOPS_MODEL_PREFIX (key prefix inside the bucket)
    - S3_BUCKET_NAME, AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_REGION
    - R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY, R2_BUCKET_NAME
    """
    return {
        "MLOPS_MODEL_REPOSITORY": (get_env("MLOPS_MODEL_REPOSITORY", "local") or "local").strip().lower(),
        "MLOPS_MODEL_DIR": get_env("MLOPS_MODEL_DIR", DEFAULT_MODEL_DIR),
        "MLOPS_MODEL_PREFIX": get_env("MLOPS_MODEL_PREFIX", "models"),
        "S3_BUCKET_NAME": get_env("S3_BUCKET_NAME"),
        "AWS_ACCESS_KEY_ID": get_env("AWS_ACCESS_KEY_ID"),
        "AWS_SECRET_ACCESS_KEY": get_env("AWS_SECRET_ACCESS_KEY"),
        "AWS_REGION": get_env("AWS_REGION"),
        "R2_ACCOUNT_ID": get_env("R2_ACCOUNT_ID"),
        "R2_ACCESS_KEY_ID": get_env("R2_ACCESS_KEY_ID"),
        "R2_SECRET_ACCESS_KEY": get_env("R2_SECRET_ACCESS_KEY"),
        "R2_BUCKET_NAME": get_env("R2_BUCKET_NAME"),
    }


# ----- Logging helpers -----

def get_log_level() -> int:
    name = (get_env("MLOPS_LOG_LEVEL", "INFO") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    """Attach a stream handler to the ``mlops`` logger once."""
    logger = logging.getLogger("mlops")
    logger.setLevel(level if level is not None else get_log_level())
    if logger.handlers:
        return logger
    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream)
    return logger
