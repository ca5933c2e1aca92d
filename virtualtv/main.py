"""
VirtualTV Main Application

FastAPI application entry point serving virtual channel guides, playlists,
and playback control.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from virtualtv import __version__
from virtualtv.config import VirtualTVConfig, load_config
from virtualtv.service import VirtualChannelService, build_catalog
from virtualtv.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[VirtualTVConfig] = None,
    service: Optional[VirtualChannelService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application config; loaded from config.yaml when omitted.
        service: Prebuilt channel service. When given, the application
            uses it as is and does not configure logging.

    Returns:
        Configured FastAPI application instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        owns_service = app.state.service is None
        if owns_service:
            app_config = config or load_config()
            setup_logging(app_config.logging)
            logger.info(f"Starting VirtualTV v{__version__}")
            catalog = build_catalog(app_config.catalog)
            app.state.service = VirtualChannelService(app_config, catalog)

        await app.state.service.start()
        logger.info("VirtualTV started successfully")

        yield

        # Shutdown
        logger.info("Shutting down VirtualTV")
        try:
            await app.state.service.stop()
        finally:
            if owns_service:
                app.state.service = None
        logger.info("VirtualTV shutdown complete")

    app = FastAPI(
        title="VirtualTV",
        description="Linear virtual channels from an on-demand media library",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.service = service

    from virtualtv.api import virtual_channels_router
    app.include_router(virtual_channels_router)

    @app.get("/health")
    async def health_check() -> dict:
        return {"status": "healthy", "version": __version__}

    return app


def main() -> None:
    """
    Main entry point for running the server.

    Called when running `python -m virtualtv.main` or via the
    `virtualtv` console script.
    """
    import uvicorn

    config = load_config()
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
