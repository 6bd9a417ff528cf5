"""System routes for DocsDesk."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from docsdesk.api.dependencies import get_servicenow_client
from docsdesk.config import Config
from docsdesk.integrations.servicenow import ServiceNowClient
from docsdesk.models import HelpDeskStats
from docsdesk.workflows import get_stats

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check(request: Request):
    """Health check. Reports configuration completeness; never calls ServiceNow."""
    client = getattr(request.app.state, "servicenow_client", None)
    missing = Config.get_missing_config()
    return {
        "status": "healthy" if client is not None else "degraded",
        "service": "docsdesk",
        "servicenow": {
            "client_ready": client is not None,
            "auth_mode": client.auth_mode.value if client is not None else Config.auth_mode(),
            "missing_config": missing if client is None else [],
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/stats", response_model=HelpDeskStats)
async def stats_route(client: ServiceNowClient = Depends(get_servicenow_client)):
    """Incident counts by state and KB deflection rate."""
    return await get_stats(client)
