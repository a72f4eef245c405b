"""Dispatch Route — adapts Starlette requests to the framework-neutral dispatcher.

Invariants:
    - One catch-all route per dispatcher: {prefix}/{action}
    - Body, form and query are read here (async); the dispatcher itself is synchronous
    - A form body that cannot be parsed is treated as an empty form
    - DispatchResponse is sent back as-is: status, headers, body (empty for preflight)
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from api_dispatch.core.request_context import InboundRequest
from api_dispatch.services.request_dispatcher import DispatchResponse, RequestDispatcher

logger = logging.getLogger(__name__)

DISPATCH_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def to_inbound_request(request: Request) -> InboundRequest:
    """Snapshot everything the pipeline needs from a Starlette request."""
    raw_body = await request.body()
    form = {}
    if request.headers.get("content-type", "").startswith(_FORM_TYPES):
        try:
            form_data = await request.form()
        except (HTTPException, MultiPartException) as exc:
            logger.warning(f"Unparseable form body on {request.url.path}: {exc}")
        else:
            form = dict(form_data.items())
    return InboundRequest(
        path=request.url.path,
        method=request.method,
        headers={key.lower(): value for key, value in request.headers.items()},
        raw_body=raw_body,
        form=form,
        query=dict(request.query_params.items()),
    )


def to_response(result: DispatchResponse) -> Response:
    return Response(
        content=result.body or b"",
        status_code=result.status_code,
        headers=result.headers,
    )


def build_dispatch_router(
    dispatcher: RequestDispatcher, prefix: str = "/api",
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=["dispatch"])

    @router.api_route(
        "/{action}", methods=DISPATCH_METHODS, include_in_schema=False,
    )
    async def dispatch_action(action: str, request: Request) -> Response:
        inbound = await to_inbound_request(request)
        result = await run_in_threadpool(dispatcher.dispatch, inbound, action)
        return to_response(result)

    return router
