"""CLI: Test metadata database connectivity using SQLAlchemy and Alembic.

Reads configuration from resources/.env via config.load_env_file().
Performs a simple SELECT 1 using SQLAlchemy, optionally creates the
tracking tables, and if available prints the current Alembic revision
from the alembic_version table.
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from mlops.config import configure_logging, get_database_url, load_env_file
from mlops.db.db_conn import DbConn

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Test the tracking database connection")
    parser.add_argument("--db-url", help="SQLAlchemy URL; defaults to MLOPS_DATABASE_URL/DATABASE_URL/DB_*")
    parser.add_argument("--echo", action="store_true", help="Enable SQLAlchemy engine echo")
    parser.add_argument("--create-schema", action="store_true", help="Create missing tracking tables")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_env_file()
    configure_logging()

    args = parse_args(argv)
    url = args.db_url or get_database_url()
    try:
        db = DbConn(db_url=url, echo=args.echo)
    except Exception as exc:
        logger.error("Failed to configure engine: %s", exc)
        return 2

    logger.info("Database: %s", make_url(db.url).render_as_string(hide_password=True))
    ok = db.test_connection()
    logger.info("Connection test: %s", "OK" if ok else "FAILED")
    if not ok:
        return 1

    if args.create_schema:
        try:
            db.create_schema()
        except SQLAlchemyError as exc:
            logger.error("Schema creation failed: %s", exc)
            return 1
        logger.info("Tracking schema is present")

    rev = db.get_alembic_revision()
    if rev:
        logger.info("Alembic revision: %s", rev)
    else:
        logger.info("Alembic revision: not found (no alembic_version table)")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
