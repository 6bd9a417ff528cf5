"""Exception handlers mapping client errors to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from docsdesk.core.errors import (
    ApiError,
    ConfigurationError,
    RequestCancelledError,
    TransportError,
)
from docsdesk.core.logging import logger


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Pass the upstream status through with its body."""
    logger.warning(
        "servicenow_api_error",
        path=request.url.path,
        status_code=exc.status_code,
        method=exc.method,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc), "upstream": exc.body},
    )


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    logger.error("servicenow_unreachable", path=request.url.path, method=exc.method)
    return JSONResponse(
        status_code=502, content={"success": False, "error": "ServiceNow unreachable"}
    )


async def cancelled_error_handler(request: Request, exc: RequestCancelledError) -> JSONResponse:
    logger.warning("servicenow_request_aborted", path=request.url.path, reason=exc.reason)
    return JSONResponse(status_code=504, content={"success": False, "error": str(exc)})


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("servicenow_misconfigured", path=request.url.path)
    return JSONResponse(
        status_code=500, content={"success": False, "error": "ServiceNow client misconfigured"}
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register handlers for the client error taxonomy."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
    app.add_exception_handler(RequestCancelledError, cancelled_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
