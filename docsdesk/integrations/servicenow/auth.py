"""Authorization header construction for the ServiceNow Table API."""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from docsdesk.core.errors import ConfigurationError


class AuthMode(str, Enum):
    """Credential scheme selected once per client."""

    BASIC = "basic"
    OAUTH = "oauth"
    API_KEY = "apiKey"


@dataclass(frozen=True)
class ServiceNowCredentials:
    """Mode-specific credentials. Only the fields for the selected mode are read."""

    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    client_id: Optional[str] = None
    client_secret: Optional[str] = field(default=None, repr=False)
    api_key: Optional[str] = field(default=None, repr=False)


def _basic(user: str, secret: str) -> str:
    token = base64.b64encode(f"{user}:{secret}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def build_auth_header(
    mode: Union[AuthMode, str], credentials: ServiceNowCredentials
) -> str:
    """Build the Authorization header value for ``mode``.

    - basic: ``Basic base64(username:password)``
    - oauth: ``Basic base64(client_id:client_secret)`` (no token exchange)
    - apiKey: ``Bearer <api_key>``

    Raises:
        ConfigurationError: Unknown mode, or credentials for the mode are missing
    """
    try:
        mode = AuthMode(mode)
    except ValueError:
        raise ConfigurationError(f"Unsupported auth mode: {mode}") from None

    match mode:
        case AuthMode.BASIC:
            if not credentials.username or not credentials.password:
                raise ConfigurationError(
                    "Basic auth requires SERVICE_NOW_USER and SERVICE_NOW_PASSWORD"
                )
            return _basic(credentials.username, credentials.password)
        case AuthMode.OAUTH:
            if not credentials.client_id or not credentials.client_secret:
                raise ConfigurationError(
                    "OAuth requires SERVICE_NOW_CLIENT_ID and SERVICE_NOW_CLIENT_SECRET"
                )
            return _basic(credentials.client_id, credentials.client_secret)
        case AuthMode.API_KEY:
            if not credentials.api_key:
                raise ConfigurationError("API Key auth requires SERVICE_NOW_API_KEY")
            return f"Bearer {credentials.api_key}"
