"""Incident intake: creation and listing."""

from typing import Dict, List, Optional

from docsdesk.core.logging import logger
from docsdesk.integrations.servicenow import ServiceNowClient, TableQueryParams
from docsdesk.models import Incident, IncidentCreate, ListIncidentsQuery

INCIDENT_TABLE = "incident"
INCIDENT_FIELDS = (
    "sys_id,number,short_description,description,state,priority,"
    "impact,urgency,category,x_cursor_suggested"
)
RESOLVED_STATE = "6"


def state_filter(state: Optional[str]) -> str:
    """Translate a state filter into an encoded query.

    "open" covers states 1-5 (new through on hold), "resolved" is state 6.
    """
    if state == "open":
        return f"state<{RESOLVED_STATE}"
    if state == "resolved":
        return f"state={RESOLVED_STATE}"
    if state:
        return f"state={state}"
    return ""


async def create_incident(client: ServiceNowClient, payload: IncidentCreate) -> Incident:
    """Create a new incident. The product is stored as the incident category."""
    logger.info(
        "incident_create_started",
        product=payload.product,
        short_description=payload.short_description,
    )

    body = {
        "short_description": payload.short_description,
        "description": payload.description,
        "priority": payload.priority,
        "impact": payload.impact,
        "urgency": payload.urgency,
        "category": payload.product,
    }
    body = {key: value for key, value in body.items() if value is not None}

    try:
        result = await client.create(INCIDENT_TABLE, body)
    except Exception as e:
        logger.error("incident_create_failed", error=str(e))
        raise

    incident = Incident(**result["result"])
    logger.info("incident_created", sys_id=incident.sys_id, number=incident.number)
    return incident


async def list_incidents(
    client: ServiceNowClient, query: Optional[ListIncidentsQuery] = None
) -> Dict[str, List[Incident]]:
    """List incidents with state filtering and pagination."""
    query = query or ListIncidentsQuery()
    logger.info("incident_list_started", state=query.state, limit=query.limit, offset=query.offset)

    try:
        result = await client.get_table(
            INCIDENT_TABLE,
            TableQueryParams(
                fields=INCIDENT_FIELDS,
                limit=query.limit,
                offset=query.offset,
                filter=state_filter(query.state),
            ),
        )
    except Exception as e:
        logger.error("incident_list_failed", error=str(e))
        raise

    incidents = [Incident(**record) for record in result["result"]]
    logger.info("incident_list_completed", count=len(incidents))
    return {"incidents": incidents}
