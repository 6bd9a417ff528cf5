"""Incident, knowledge article and resolution models."""

from typing import Literal, Optional

from pydantic import BaseModel, Field, validator

from docsdesk.models.base import ServiceNowRecord

Priority = Literal["1", "2", "3", "4", "5"]
Level = Literal["1", "2", "3"]


class IncidentCreate(BaseModel):
    """Request body for creating an incident."""

    short_description: str = Field(..., min_length=1, max_length=160)
    description: Optional[str] = Field(None, max_length=4000)
    product: Optional[str] = Field(None, description="Stored as the incident category")
    priority: Optional[Priority] = None
    impact: Optional[Level] = None
    urgency: Optional[Level] = None

    @validator("short_description")
    def strip_short_description(cls, v: str) -> str:
        """Reject whitespace-only descriptions."""
        v = v.strip()
        if not v:
            raise ValueError("short_description must not be blank")
        return v


class ListIncidentsQuery(BaseModel):
    """Filters and pagination for listing incidents.

    state: "open" (state < 6), "resolved" (state = 6) or a raw state value.
    """

    state: Optional[str] = "open"
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)


class ResolveRequest(BaseModel):
    """Request body for resolving an incident."""

    resolution_note: str = Field(..., min_length=1, max_length=4000)


class Incident(ServiceNowRecord):
    """Incident record."""

    number: Optional[str] = None
    short_description: str = ""
    description: Optional[str] = None
    state: str = ""
    priority: Optional[str] = None
    impact: Optional[str] = None
    urgency: Optional[str] = None
    category: Optional[str] = None
    x_cursor_suggested: Optional[bool] = None

    @validator("x_cursor_suggested", pre=True)
    def blank_flag_is_unset(cls, v):
        """ServiceNow returns "" for unset booleans."""
        return None if v == "" else v


class KBArticle(ServiceNowRecord):
    """Knowledge base article."""

    number: Optional[str] = None
    short_description: str = ""
    text: Optional[str] = None


class ResolvedIncident(ServiceNowRecord):
    """Incident record after resolution."""

    number: Optional[str] = None
    state: str = ""
    close_code: Optional[str] = None
    close_notes: Optional[str] = None
    resolved_at: Optional[str] = None
