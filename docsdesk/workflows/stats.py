"""Help desk statistics: state counts and KB deflection rate."""

from typing import Any, Dict, Optional

from docsdesk.core.logging import logger
from docsdesk.integrations.servicenow import ServiceNowClient, TableQueryParams
from docsdesk.models import DeflectionStats, HelpDeskStats, IncidentCounts
from docsdesk.workflows.kb import SUGGESTED_MARKER

STATS_FETCH_LIMIT = 10000


def _state(record: Dict[str, Any]) -> Optional[int]:
    try:
        return int(record.get("state"))
    except (TypeError, ValueError):
        return None


def _was_suggested(record: Dict[str, Any]) -> bool:
    flag = record.get("u_cursor_suggested")
    if flag is True or flag == "true":
        return True
    return SUGGESTED_MARKER in (record.get("work_notes") or "")


def compute_stats(records: list) -> HelpDeskStats:
    """Aggregate incident records into counts and deflection metrics.

    Deflection rate is resolved-after-suggestion over all incidents, as a
    percentage rounded to 2 places.
    """
    states = [_state(record) for record in records]
    total = len(records)
    open_count = sum(1 for s in states if s is not None and s < 2)
    in_progress = sum(1 for s in states if s is not None and 2 <= s < 6)
    resolved = sum(1 for s in states if s == 6)

    suggested = sum(1 for record in records if _was_suggested(record))
    resolved_after_suggestion = sum(
        1 for record, s in zip(records, states) if s == 6 and _was_suggested(record)
    )
    rate = (resolved_after_suggestion / total) * 100 if total else 0.0

    return HelpDeskStats(
        counts=IncidentCounts(
            open=open_count, in_progress=in_progress, resolved=resolved, total=total
        ),
        deflection=DeflectionStats(
            total_incidents=total,
            suggested_incidents=suggested,
            resolved_after_suggestion=resolved_after_suggestion,
            deflection_rate=round(rate, 2),
        ),
    )


async def get_stats(client: ServiceNowClient) -> HelpDeskStats:
    """Fetch incidents and compute help desk statistics."""
    logger.info("stats_started")

    try:
        result = await client.get_table(
            "incident",
            TableQueryParams(
                fields="sys_id,state,work_notes,u_cursor_suggested",
                limit=STATS_FETCH_LIMIT,
            ),
        )
    except Exception as e:
        logger.error("stats_failed", error=str(e))
        raise

    stats = compute_stats(result["result"])
    logger.info("stats_completed", **stats.counts.dict())
    return stats
