"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses -> appropriate HTTP status (400, 404, 500)
- Router 405 on a gated path -> admission pipeline METHOD_REJECTED response
- Unexpected Exception -> generic 500 (safety net)
- All responses include request_id for distributed tracing

Routes that must keep admission headers on their error responses build the
payload with ``error_status`` and ``build_error_content`` directly.
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.exception_handlers import http_exception_handler as default_http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from autobrief.core.admission import GATED_PATH_PREFIX
from autobrief.core.errors import AppError, LLMAppError, NotFoundAppError
from autobrief.core.logging import get_request_id

logger = logging.getLogger(__name__)


def error_status(exc: AppError) -> int:
    """Map a domain error to its HTTP status code.

    - NotFoundAppError -> 404 Not Found
    - LLMAppError -> 500 Internal Server Error (server fault)
    - anything else (ValidationAppError included) -> 400 Bad Request
    """
    if isinstance(exc, NotFoundAppError):
        return 404
    if isinstance(exc, LLMAppError):
        return 500
    return 400


def build_error_content(exc: AppError) -> dict[str, Any]:
    """Build the ``{"error": {...}}`` envelope for a domain error."""
    error_content: dict[str, Any] = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }

    # Include details only if present (optional structured context)
    if exc.details:
        error_content["details"] = exc.details

    return {"error": error_content}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = error_status(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        }
    )

    return JSONResponse(
        status_code=status_code,
        content=build_error_content(exc),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Send router-level 405s on gated paths through the admission pipeline.

    Gated routes only register POST and OPTIONS, so any other verb (HEAD,
    TRACE, custom methods) fails routing. The pipeline still answers it with
    its METHOD_REJECTED response and the policy headers. Other HTTP errors
    keep the FastAPI default.
    """
    pipeline = getattr(request.app.state, "admission_pipeline", None)
    if (
        exc.status_code == 405
        and pipeline is not None
        and request.url.path.startswith(GATED_PATH_PREFIX + "/")
    ):
        admission = pipeline.admit(
            method=request.method,
            headers=request.headers,
            peer_host=request.client.host if request.client else None,
            body={},
            allowed_fields=(),
        )
        if admission.response is not None:
            return admission.response

    return await default_http_exception_handler(request, exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Specific handlers are registered before the general fallback.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
