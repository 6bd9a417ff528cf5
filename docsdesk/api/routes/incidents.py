"""Incident routes for DocsDesk."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from docsdesk.api.dependencies import get_servicenow_client
from docsdesk.integrations.servicenow import ServiceNowClient
from docsdesk.models import (
    Incident,
    IncidentCreate,
    ListIncidentsQuery,
    ResolvedIncident,
    ResolveRequest,
)
from docsdesk.workflows import create_incident, list_incidents, resolve_incident, suggest_articles
from docsdesk.workflows.kb import SYS_ID_PATTERN

router = APIRouter(prefix="/incidents", tags=["Incidents"])


@router.post("", status_code=201, response_model=Incident)
async def create_incident_route(
    payload: IncidentCreate,
    client: ServiceNowClient = Depends(get_servicenow_client),
):
    """Create an incident.

    - **short_description**: One-line summary (required)
    - **product**: Stored as the incident category
    - **priority / impact / urgency**: ServiceNow numeric levels as strings
    """
    return await create_incident(client, payload)


@router.get("")
async def list_incidents_route(
    state: Optional[str] = "open",
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    client: ServiceNowClient = Depends(get_servicenow_client),
):
    """List incidents. state: open, resolved, or a raw state value."""
    query = ListIncidentsQuery(state=state, limit=limit, offset=offset)
    return await list_incidents(client, query)


@router.get("/{sys_id}/suggestions")
async def suggest_articles_route(
    sys_id: str = Path(..., pattern=SYS_ID_PATTERN),
    client: ServiceNowClient = Depends(get_servicenow_client),
):
    """Suggest KB articles for an incident."""
    articles = await suggest_articles(client, sys_id)
    return {"articles": articles}


@router.post("/{sys_id}/resolve", response_model=ResolvedIncident)
async def resolve_incident_route(
    sys_id: str,
    request: ResolveRequest,
    client: ServiceNowClient = Depends(get_servicenow_client),
):
    """Resolve an incident with a resolution note."""
    return await resolve_incident(client, sys_id, request.resolution_note)
