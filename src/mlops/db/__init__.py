"""Relational persistence for the tracking metadata store."""
from mlops.db.base import Base
from mlops.db.db_conn import DbConn

__all__ = ["Base", "DbConn"]
