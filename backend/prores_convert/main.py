"""
ProRes conversion backend: upload, status, download.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, configure_logging
from .jobs.engine import JobEngine
from .jobs.registry import JobRegistry
from .execution.supervisor import ProcessSupervisor
from .routes import convert, health

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[JobRegistry] = None,
) -> FastAPI:
    """
    Create the conversion API application.

    Args:
        settings: Runtime settings. Read from the environment if not provided.
        registry: Job registry to share. A fresh one is created if not provided.

    Returns:
        FastAPI application with the convert, status, download and health routes
    """
    settings = settings or Settings.from_env()
    settings.ensure_directories()

    registry = registry or JobRegistry()
    supervisor = ProcessSupervisor(registry)

    app = FastAPI(title="ProRes Convert Backend", version=__version__)

    # Preflight requests are answered by the middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.state.settings = settings
    app.state.job_registry = registry
    app.state.supervisor = supervisor
    app.state.job_engine = JobEngine(
        settings=settings,
        registry=registry,
        supervisor=supervisor,
    )

    app.include_router(health.router)
    app.include_router(convert.router, prefix=settings.api_prefix)

    logger.info(
        f"[Server] Uploads in {settings.upload_dir}, outputs in {settings.output_dir}"
    )
    return app


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)


def run_server(settings: Optional[Settings] = None) -> None:
    """
    Run the API server with uvicorn.

    Args:
        settings: Runtime settings. Serves the module-level app if not provided.
    """
    import uvicorn

    if settings is None:
        settings, server_app = _settings, app
    else:
        configure_logging(settings.log_level)
        server_app = create_app(settings)

    logger.info(f"[Server] API listening on {settings.host}:{settings.port}")
    uvicorn.run(server_app, host=settings.host, port=settings.port)
