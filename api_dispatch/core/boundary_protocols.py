"""Boundary Protocols — contracts between the dispatch core and its collaborators.

Invariants:
    - Core never reaches for ambient globals: sink and hook are passed in explicitly
    - LogSink levels are exactly "info" and "error"
"""

from typing import Literal, Protocol

from api_dispatch.core.request_context import RequestContext

LogLevel = Literal["info", "error"]


class LogSink(Protocol):
    """Accepts (message, category, level) log records."""
    def log(self, message: str, category: str, level: LogLevel) -> None: ...


class AuthorizationHook(Protocol):
    """Called once per non-whitelisted request, before binding."""
    def __call__(self, context: RequestContext) -> bool: ...


def allow_all(context: RequestContext) -> bool:
    """Default authorization hook."""
    return True
