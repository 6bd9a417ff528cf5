"""Help desk statistics models."""

from pydantic import BaseModel


class IncidentCounts(BaseModel):
    """Incident counts by state bucket."""

    open: int
    in_progress: int
    resolved: int
    total: int


class DeflectionStats(BaseModel):
    """How often suggested KB articles led to resolution."""

    total_incidents: int
    suggested_incidents: int
    resolved_after_suggestion: int
    deflection_rate: float  # percentage, 2 decimal places


class HelpDeskStats(BaseModel):
    """Response for /stats."""

    counts: IncidentCounts
    deflection: DeflectionStats
