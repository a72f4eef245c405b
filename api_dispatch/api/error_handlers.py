"""Error Handlers — global exception handlers for failures outside the dispatcher.

Invariants:
    - Dispatched actions never reach these handlers; the dispatcher answers every
      request it receives with its own envelope
    - HTTPException (unknown route, wrong method) → envelope with the exception's status
    - Exception (catch-all) → masked 500 envelope, never leaks internal details
    - Every body has the same envelope shape the dispatcher emits
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import Response
from starlette.exceptions import HTTPException

from api_dispatch.core.envelope import JSON_CONTENT_TYPE, serialize_envelope
from api_dispatch.core.error_classifier import MASKED_MESSAGE

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _envelope_response(
    status_code: int, envelope: dict, headers: dict | None = None,
) -> Response:
    response_headers = dict(headers or {})
    response_headers["Content-Type"] = JSON_CONTENT_TYPE
    return Response(
        content=serialize_envelope(envelope),
        status_code=status_code,
        headers=response_headers,
    )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        logger.warning(
            f"HTTP {exc.status_code} on {request.url.path}: {exc.detail}",
        )
        return _envelope_response(exc.status_code, {
            "success": False,
            "final": True,
            "error": str(exc.detail),
            "code": exc.status_code,
        }, getattr(exc, "headers", None))


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return _envelope_response(status.HTTP_500_INTERNAL_SERVER_ERROR, {
            "success": False,
            "final": True,
            "error": MASKED_MESSAGE,
            "code": 0,
        })
