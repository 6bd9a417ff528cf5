"""Configuration management for DocsDesk.

Centralizes all environment variable access for better testability and maintainability.
"""

import os
from typing import List, Optional


class Config:
    """Application configuration loaded from environment variables."""

    # ServiceNow instance
    @staticmethod
    def service_now_instance() -> Optional[str]:
        """Get ServiceNow instance base URL (e.g. https://acme.service-now.com)."""
        return os.environ.get("SERVICE_NOW_INSTANCE")

    @staticmethod
    def auth_mode() -> str:
        """Get auth mode: basic, oauth or apiKey."""
        return os.environ.get("AUTH_MODE", "basic")

    @staticmethod
    def service_now_user() -> Optional[str]:
        """Get Basic auth username."""
        return os.environ.get("SERVICE_NOW_USER")

    @staticmethod
    def service_now_password() -> Optional[str]:
        """Get Basic auth password."""
        return os.environ.get("SERVICE_NOW_PASSWORD")

    @staticmethod
    def service_now_client_id() -> Optional[str]:
        """Get OAuth client ID."""
        return os.environ.get("SERVICE_NOW_CLIENT_ID")

    @staticmethod
    def service_now_client_secret() -> Optional[str]:
        """Get OAuth client secret."""
        return os.environ.get("SERVICE_NOW_CLIENT_SECRET")

    @staticmethod
    def service_now_api_key() -> Optional[str]:
        """Get API key for Bearer auth."""
        return os.environ.get("SERVICE_NOW_API_KEY")

    @staticmethod
    def service_now_timeout() -> float:
        """Get per-attempt HTTP timeout in seconds."""
        return float(os.environ.get("SERVICE_NOW_TIMEOUT", "30"))

    # Runtime
    @staticmethod
    def environment() -> str:
        """Get runtime environment (development or production)."""
        return os.environ.get("DOCSDESK_ENV", "development")

    @staticmethod
    def log_level() -> str:
        """Get log level name."""
        return os.environ.get("LOG_LEVEL", "info")

    # Helper methods
    @staticmethod
    def is_configured() -> bool:
        """Check if all required configuration is present."""
        return not Config.get_missing_config()

    @staticmethod
    def get_missing_config() -> List[str]:
        """Get list of missing required configuration keys for the selected auth mode."""
        missing = []
        if not Config.service_now_instance():
            missing.append("SERVICE_NOW_INSTANCE")

        mode = Config.auth_mode()
        if mode == "basic":
            if not Config.service_now_user():
                missing.append("SERVICE_NOW_USER")
            if not Config.service_now_password():
                missing.append("SERVICE_NOW_PASSWORD")
        elif mode == "oauth":
            if not Config.service_now_client_id():
                missing.append("SERVICE_NOW_CLIENT_ID")
            if not Config.service_now_client_secret():
                missing.append("SERVICE_NOW_CLIENT_SECRET")
        elif mode == "apiKey":
            if not Config.service_now_api_key():
                missing.append("SERVICE_NOW_API_KEY")
        else:
            missing.append("AUTH_MODE (basic, oauth or apiKey)")
        return missing


# Singleton instance for easy access
config = Config()
