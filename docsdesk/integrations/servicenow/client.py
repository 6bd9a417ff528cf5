"""ServiceNow Table API client.

Supports Basic, OAuth-labelled (client id/secret over Basic) and API key auth.
Every call goes through RetryPolicy: 429 and 5xx responses and transport
failures are retried with jittered exponential backoff; other 4xx fail fast.
"""

import asyncio
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import httpx

from docsdesk.config import Config
from docsdesk.core.errors import ApiError, ConfigurationError, TransportError
from docsdesk.core.execution import RetryPolicy
from docsdesk.core.logging import logger
from docsdesk.core.retry_config import RetryConfig
from docsdesk.integrations.servicenow.auth import (
    AuthMode,
    ServiceNowCredentials,
    build_auth_header,
)
from docsdesk.integrations.servicenow.query import TableQueryParams, build_query_string

USER_AGENT = "DocsDesk-ServiceNow-Client/1.0"
TABLE_API_PATH = "/api/now/table"
DEFAULT_TIMEOUT = 30.0


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a Retry-After header as whole seconds.

    Absent, non-numeric or negative values are ignored (None).
    """
    if value is None:
        return None
    try:
        seconds = int(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _parse_body(response: httpx.Response) -> Any:
    """Parse a JSON body, falling back to {} for empty or malformed bodies."""
    try:
        return response.json()
    except ValueError:
        return {}


class ServiceNowClient:
    """Async ServiceNow Table API client.

    Instance URL and Authorization header are fixed at construction; the
    client holds no other mutable state and is safe to share between
    concurrent callers. Rotating credentials means building a new client.
    """

    def __init__(
        self,
        instance_url: str,
        auth_mode: Union[AuthMode, str],
        credentials: ServiceNowCredentials,
        *,
        retry_config: Optional[RetryConfig] = None,
        retry_policy: Optional[RetryPolicy] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize client.

        Args:
            instance_url: Base URL, e.g. https://acme.service-now.com (trailing slash dropped)
            auth_mode: basic, oauth or apiKey
            credentials: Credentials for the selected mode
            retry_config: Retry settings (ignored when retry_policy is given)
            retry_policy: Pre-built RetryPolicy (e.g. with seeded rng)
            http_client: Shared httpx.AsyncClient; one is created (and owned) if omitted
            timeout: Per-attempt HTTP timeout in seconds

        Raises:
            ConfigurationError: Missing instance URL or credentials for auth_mode
        """
        if not instance_url:
            raise ConfigurationError("SERVICE_NOW_INSTANCE is required")

        # Header is built before any transport exists
        self._auth_header = build_auth_header(auth_mode, credentials)
        self._auth_mode = AuthMode(auth_mode)
        self._instance_url = instance_url.rstrip("/")
        self._retry = retry_policy or RetryPolicy(retry_config)
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: Optional[Config] = None, **kwargs: Any) -> "ServiceNowClient":
        """Build a client from environment configuration."""
        config = config or Config()
        credentials = ServiceNowCredentials(
            username=config.service_now_user(),
            password=config.service_now_password(),
            client_id=config.service_now_client_id(),
            client_secret=config.service_now_client_secret(),
            api_key=config.service_now_api_key(),
        )
        kwargs.setdefault("timeout", config.service_now_timeout())
        return cls(
            config.service_now_instance() or "",
            config.auth_mode(),
            credentials,
            **kwargs,
        )

    @property
    def instance_url(self) -> str:
        return self._instance_url

    @property
    def auth_mode(self) -> AuthMode:
        return self._auth_mode

    def __repr__(self) -> str:
        return f"ServiceNowClient(instance_url={self._instance_url!r}, auth_mode={self._auth_mode.value!r})"

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "ServiceNowClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": self._auth_header,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    def table_url(self, table: str, sys_id: Optional[str] = None) -> str:
        """Absolute URL for a table collection or a single record.

        Table and record id are percent-encoded as single path segments.

        Raises:
            ValueError: Empty table name, or sys_id given but empty
        """
        if not table:
            raise ValueError("table must not be empty")
        url = f"{self._instance_url}{TABLE_API_PATH}/{quote(table, safe='')}"
        if sys_id is None:
            return url
        if not sys_id:
            raise ValueError("sys_id must not be empty")
        return f"{url}/{quote(sys_id, safe='')}"

    async def _send(self, method: str, url: str, body: Optional[Dict[str, Any]]) -> Any:
        """Issue exactly one HTTP attempt."""
        try:
            response = await self._http.request(
                method,
                url,
                headers=self._headers(),
                json=body,
            )
        except httpx.TransportError as e:
            raise TransportError(
                f"ServiceNow transport error: {type(e).__name__}", method=method, url=url
            ) from e

        data = _parse_body(response)

        if not response.is_success:
            raise ApiError(
                response.status_code,
                data,
                retry_after_seconds=parse_retry_after(response.headers.get("retry-after")),
                method=method,
                url=url,
                reason=response.reason_phrase,
            )

        return data

    async def _request(
        self,
        method: str,
        url: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        table: str,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Make HTTP request with retry logic."""
        return await self._retry.execute(
            lambda: self._send(method, url, body),
            cancel_event=cancel_event,
            timeout=timeout,
            context={"method": method, "url": url, "table": table},
        )

    async def get_table(
        self,
        table: str,
        params: Optional[TableQueryParams] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Get records from a table.

        Returns:
            {"result": [record, ...]}
        """
        url = self.table_url(table) + build_query_string(params)
        logger.debug("servicenow_request", method="GET", url=url, table=table)
        return await self._request(
            "GET", url, table=table, cancel_event=cancel_event, timeout=timeout
        )

    async def create(
        self,
        table: str,
        payload: Dict[str, Any],
        *,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Create a record.

        Returns:
            {"result": record}
        """
        url = self.table_url(table)
        logger.debug("servicenow_request", method="POST", url=url, table=table, payload=payload)
        return await self._request(
            "POST", url, payload, table=table, cancel_event=cancel_event, timeout=timeout
        )

    async def patch(
        self,
        table: str,
        sys_id: str,
        payload: Dict[str, Any],
        *,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Update a record. Only the supplied fields change.

        Returns:
            {"result": record}
        """
        url = self.table_url(table, sys_id)
        logger.debug("servicenow_request", method="PATCH", url=url, table=table, sys_id=sys_id)
        return await self._request(
            "PATCH", url, payload, table=table, cancel_event=cancel_event, timeout=timeout
        )

    async def delete(
        self,
        table: str,
        sys_id: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Delete a record."""
        url = self.table_url(table, sys_id)
        logger.debug("servicenow_request", method="DELETE", url=url, table=table, sys_id=sys_id)
        await self._request(
            "DELETE", url, table=table, cancel_event=cancel_event, timeout=timeout
        )
