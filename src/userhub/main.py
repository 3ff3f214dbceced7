"""FastAPI application entry point."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from .api.errors import register_error_handlers
from .config import AppConfig, load_config
from .dependencies import include_routers
from .logging import configure_logging

logger = structlog.get_logger(__name__)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build FastAPI instance with configured dependencies.

    The engine held by ``config`` is disposed when the application shuts down.
    """
    cfg = config or load_config()
    configure_logging(cfg.log_level)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info("server.ready", host=cfg.host, port=cfg.port, message="Server is running!")
        try:
            yield
        finally:
            cfg.engine.dispose()
            logger.info("server.stopped")

    app = FastAPI(title="userhub", lifespan=lifespan)
    register_error_handlers(app)
    include_routers(app, cfg)
    return app
