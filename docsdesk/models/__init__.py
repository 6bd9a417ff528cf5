"""Pydantic models for DocsDesk.

Models are organized by domain:
- base: Base record model for Table API results
- incidents: Incident intake, listing, KB articles and resolution
- stats: Help desk statistics
"""

from docsdesk.models.base import ServiceNowRecord
from docsdesk.models.incidents import (
    Incident,
    IncidentCreate,
    KBArticle,
    ListIncidentsQuery,
    ResolvedIncident,
    ResolveRequest,
)
from docsdesk.models.stats import DeflectionStats, HelpDeskStats, IncidentCounts

__all__ = [
    "ServiceNowRecord",
    "Incident",
    "IncidentCreate",
    "KBArticle",
    "ListIncidentsQuery",
    "ResolvedIncident",
    "ResolveRequest",
    "DeflectionStats",
    "HelpDeskStats",
    "IncidentCounts",
]
