"""FastAPI application factory for DocsDesk."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from docsdesk.api.errors import register_error_handlers
from docsdesk.api.middleware import request_id_middleware
from docsdesk.api.routes import incidents, system
from docsdesk.core.errors import ConfigurationError
from docsdesk.core.logging import logger
from docsdesk.integrations.servicenow import ServiceNowClient


@asynccontextmanager
async def _config_client_lifespan(app: FastAPI):
    """Build a client from environment config on startup; close it on shutdown."""
    try:
        app.state.servicenow_client = ServiceNowClient.from_config()
        logger.info("servicenow_client_initialized", instance=app.state.servicenow_client.instance_url)
    except ConfigurationError as e:
        # Serve /health in degraded mode; other routes answer 503
        app.state.servicenow_client = None
        logger.error("servicenow_client_unconfigured", error=str(e))

    yield

    if app.state.servicenow_client is not None:
        await app.state.servicenow_client.aclose()


def create_app(client: Optional[ServiceNowClient] = None) -> FastAPI:
    """Create and configure FastAPI app. Factory pattern for testability.

    Args:
        client: Pre-built ServiceNow client. When omitted, one is built from
            environment config at startup.
    """
    app = FastAPI(
        title="docsdesk",
        description=(
            "Help desk API over the ServiceNow Table API: incident intake, "
            "KB article suggestions, resolution and deflection statistics."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=None if client is not None else _config_client_lifespan,
    )

    app.state.servicenow_client = client

    # Add middleware
    app.middleware("http")(request_id_middleware)

    register_error_handlers(app)

    # Register routes
    app.include_router(system.router)
    app.include_router(incidents.router)

    return app
