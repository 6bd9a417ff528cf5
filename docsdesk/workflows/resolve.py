"""Incident resolution."""

from datetime import datetime, timezone
from typing import Optional

from docsdesk.core.logging import logger
from docsdesk.integrations.servicenow import ServiceNowClient
from docsdesk.models import ResolvedIncident

RESOLVED_STATE = "6"
CLOSE_CODE = "Solved (Permanently)"


async def resolve_incident(
    client: ServiceNowClient,
    incident_sys_id: str,
    resolution_note: str,
    *,
    now: Optional[datetime] = None,
) -> ResolvedIncident:
    """Resolve an incident with a standard close code and the given note."""
    logger.info("incident_resolve_started", incident_sys_id=incident_sys_id)
    resolved_at = (now or datetime.now(timezone.utc)).isoformat()

    try:
        result = await client.patch(
            "incident",
            incident_sys_id,
            {
                "state": RESOLVED_STATE,
                "close_code": CLOSE_CODE,
                "close_notes": resolution_note,
                "resolved_at": resolved_at,
            },
        )
    except Exception as e:
        logger.error("incident_resolve_failed", incident_sys_id=incident_sys_id, error=str(e))
        raise

    incident = ResolvedIncident(**result["result"])
    logger.info("incident_resolved", sys_id=incident.sys_id, number=incident.number)
    return incident
