"""Help desk workflows built on the ServiceNow client.

Each workflow takes the client as its first argument.
"""

from docsdesk.workflows.intake import create_incident, list_incidents
from docsdesk.workflows.kb import build_kb_query, extract_keywords, suggest_articles
from docsdesk.workflows.resolve import resolve_incident
from docsdesk.workflows.stats import get_stats

__all__ = [
    "create_incident",
    "list_incidents",
    "build_kb_query",
    "extract_keywords",
    "suggest_articles",
    "resolve_incident",
    "get_stats",
]
