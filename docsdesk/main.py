"""Main entry point for DocsDesk.

Usage:
    Development: uvicorn docsdesk.main:app --reload --port 8000
    Production: uvicorn docsdesk.main:app --host 0.0.0.0 --port 8000 --workers 4
"""

from docsdesk.api import create_app

# ServiceNow client is built from environment config at startup
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docsdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
