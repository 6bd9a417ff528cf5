"""FastAPI dependencies for DocsDesk.

Dependency injection functions for route handlers.
"""

from fastapi import HTTPException, Request

from docsdesk.integrations.servicenow import ServiceNowClient


def get_servicenow_client(request: Request) -> ServiceNowClient:
    """Get the ServiceNow client from app state.

    Raises:
        HTTPException: 503 if no client was configured at startup
    """
    client = getattr(request.app.state, "servicenow_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="ServiceNow client not configured")
    return client
