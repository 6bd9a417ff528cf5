"""Base Pydantic models for DocsDesk.

ServiceNow records carry many more fields than we model; base record models
keep whatever extra fields the instance returns.
"""

from pydantic import BaseModel


class ServiceNowRecord(BaseModel):
    """Base model for records read back from the Table API."""

    sys_id: str

    class Config:
        extra = "allow"
