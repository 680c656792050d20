"""Serve the query API: ``python -m mlops.web`` or ``mlops-api``."""
from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from mlops.config import get_env, load_env_file


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the read-only tracking API")
    parser.add_argument("--host", default=None, help="Bind address; defaults to MLOPS_API_HOST or 127.0.0.1")
    parser.add_argument("--port", type=int, default=None, help="Port; defaults to MLOPS_API_PORT or 8000")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_env_file()
    args = parse_args(argv)
    host = args.host or get_env("MLOPS_API_HOST", "127.0.0.1")
    port = args.port or int(get_env("MLOPS_API_PORT", "8000") or "8000")
    uvicorn.run("mlops.web.app:app", host=host, port=port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
