"""HTTP API for DocsDesk."""

from docsdesk.api.app import create_app

__all__ = ["create_app"]
