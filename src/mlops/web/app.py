from __future__ import annotations

from fastapi import FastAPI

from mlops import __version__
from mlops.config import configure_logging, load_env_file
from mlops.web.routes import experiments, runs


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    load_env_file()
    configure_logging()

    app = FastAPI(
        title="MLOps Tracking API",
        version=__version__,
        description="Read-only access to tracked experiments, runs and logged facts.",
    )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(experiments.router)
    app.include_router(runs.router)

    return app


app = create_app()
