"""Knowledge base suggestions for incidents.

Keywords are pulled from the incident text and matched against active
kb_knowledge articles. Suggested incidents are flagged so deflection can be
measured in stats.
"""

import re
from typing import Any, Dict, List

from docsdesk.core.logging import logger
from docsdesk.integrations.servicenow import ServiceNowClient, TableQueryParams
from docsdesk.models import KBArticle

KB_TABLE = "kb_knowledge"
SUGGESTED_MARKER = "[cursor_suggested]"
MAX_KEYWORDS = 5
MAX_ARTICLES = 3

STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "her",
    "was", "one", "our", "out", "day", "get", "has", "him", "his", "how",
    "its", "may", "new", "now", "old", "see", "two", "who", "way", "use",
    "she", "your", "their",
})

_NON_WORD = re.compile(r"[^\w]")

# Encoded-query operators; an id containing them would rewrite the filter
SYS_ID_PATTERN = r"^[^\^=]+$"
_SYS_ID = re.compile(SYS_ID_PATTERN)


def extract_keywords(text: str) -> List[str]:
    """Lowercase, split on whitespace, strip punctuation and keep words > 3 chars.

    Stop words are dropped and duplicates removed, keeping first-seen order.
    """
    keywords: Dict[str, None] = {}
    for raw in text.lower().split():
        word = _NON_WORD.sub("", raw)
        if len(word) > 3 and word not in STOP_WORDS:
            keywords.setdefault(word, None)
    return list(keywords)


def build_kb_query(keywords: List[str]) -> str:
    """OR together LIKE matches on short_description and text for the first 5 keywords."""
    return "^OR".join(
        f"short_descriptionLIKE{keyword}^ORtextLIKE{keyword}"
        for keyword in keywords[:MAX_KEYWORDS]
    )


async def _mark_suggested(client: ServiceNowClient, incident_sys_id: str) -> None:
    """Flag the incident via u_cursor_suggested, or a work_notes marker if that field is absent."""
    current = await client.get_table(
        "incident",
        TableQueryParams(
            filter=f"sys_id={incident_sys_id}",
            fields="sys_id,work_notes,u_cursor_suggested",
            limit=1,
        ),
    )
    if not current["result"]:
        return

    record: Dict[str, Any] = current["result"][0]
    if "u_cursor_suggested" in record:
        await client.patch("incident", incident_sys_id, {"u_cursor_suggested": True})
        logger.debug("incident_marked_suggested", sys_id=incident_sys_id, via="custom_field")
        return

    notes = record.get("work_notes") or ""
    if SUGGESTED_MARKER not in notes:
        notes = f"{notes}\n{SUGGESTED_MARKER}".strip()
    await client.patch("incident", incident_sys_id, {"work_notes": notes})
    logger.debug("incident_marked_suggested", sys_id=incident_sys_id, via="work_notes")


async def suggest_articles(client: ServiceNowClient, incident_sys_id: str) -> List[KBArticle]:
    """Suggest up to three KB articles for an incident."""
    if not _SYS_ID.fullmatch(incident_sys_id or ""):
        raise ValueError(f"invalid incident sys_id: {incident_sys_id!r}")

    logger.info("kb_suggest_started", incident_sys_id=incident_sys_id)

    try:
        incident_result = await client.get_table(
            "incident",
            TableQueryParams(
                filter=f"sys_id={incident_sys_id}",
                fields="sys_id,short_description,description",
                limit=1,
            ),
        )

        if not incident_result["result"]:
            logger.warning("kb_incident_not_found", incident_sys_id=incident_sys_id)
            return []

        incident = incident_result["result"][0]
        search_text = (
            f"{incident.get('short_description') or ''} {incident.get('description') or ''}"
        ).strip()
        if not search_text:
            logger.warning("kb_no_search_text", incident_sys_id=incident_sys_id)
            return []

        keywords = extract_keywords(search_text)
        logger.debug("kb_keywords_extracted", terms=keywords)
        if not keywords:
            logger.warning("kb_no_keywords", incident_sys_id=incident_sys_id)
            return []

        kb_result = await client.get_table(
            KB_TABLE,
            TableQueryParams(
                filter=f"active=true^{build_kb_query(keywords)}",
                fields="sys_id,number,short_description",
                limit=MAX_ARTICLES,
            ),
        )

        try:
            await _mark_suggested(client, incident_sys_id)
        except Exception as e:
            # Marking only feeds stats; suggestions are still returned
            logger.warning(
                "kb_mark_suggested_failed", incident_sys_id=incident_sys_id, error=str(e)
            )

        articles = [KBArticle(**record) for record in kb_result["result"]]
        logger.info("kb_suggest_completed", incident_sys_id=incident_sys_id, count=len(articles))
        return articles

    except Exception as e:
        logger.error("kb_suggest_failed", incident_sys_id=incident_sys_id, error=str(e))
        raise
