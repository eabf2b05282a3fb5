"""Main FastAPI application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging
import httpx

from integration_hub.core.config import Settings, get_settings
from integration_hub.api import health, integrations, webhooks
from integration_hub.services.hub import IntegrationHub, create_hub
from integration_hub.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    hub: Optional[IntegrationHub] = None,
) -> FastAPI:
    """Create the application; a prebuilt ``hub`` replaces the default one."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting up integration hub...")
        logger.info(f"Service: {settings.service_name}")
        logger.info(f"Environment: {settings.environment}")

        owns_hub = hub is None
        if owns_hub:
            http_client = httpx.AsyncClient(timeout=settings.action_timeout_seconds)
            app.state.hub = create_hub(settings, http_client=http_client)
        else:
            app.state.hub = hub

        yield

        logger.info("Shutting down integration hub...")
        if owns_hub:
            await app.state.hub.aclose()

    app = FastAPI(
        title="Integration Hub",
        description="Integration registry, connection lifecycle and webhook processing",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(
        integrations.router,
        prefix="/api/v1/integrations",
        tags=["integrations"]
    )
    app.include_router(
        webhooks.router,
        prefix="/api/v1/webhooks",
        tags=["webhooks"]
    )

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "integration_hub.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )
