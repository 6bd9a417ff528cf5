"""DocsDesk: help desk API over a resilient ServiceNow Table API client."""
