"""ServiceNow Table API integration."""

from docsdesk.integrations.servicenow.auth import (
    AuthMode,
    ServiceNowCredentials,
    build_auth_header,
)
from docsdesk.integrations.servicenow.client import ServiceNowClient, parse_retry_after
from docsdesk.integrations.servicenow.query import TableQueryParams, build_query_string

__all__ = [
    "AuthMode",
    "ServiceNowCredentials",
    "build_auth_header",
    "ServiceNowClient",
    "parse_retry_after",
    "TableQueryParams",
    "build_query_string",
]
