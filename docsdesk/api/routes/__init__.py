"""Routes for DocsDesk."""

from docsdesk.api.routes import incidents, system

__all__ = ["incidents", "system"]
