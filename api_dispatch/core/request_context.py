"""Request Context — the per-request object threaded through the dispatch pipeline.

Invariants:
    - One RequestContext per inbound request; it owns that request's ParameterSource
    - The dispatcher keeps no request state on itself; everything lives here
    - InboundRequest header keys are lower-case
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, NoReturn

from api_dispatch.core.errors import DispatchError, RequiredParamsError
from api_dispatch.core.request_parameters import ParameterSource


@dataclass(frozen=True)
class InboundRequest:
    """Framework-neutral snapshot of an HTTP request."""
    path: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    raw_body: bytes = b""
    form: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, Any] = field(default_factory=dict)

    @property
    def origin(self) -> str | None:
        return self.headers.get("origin") or None

    @property
    def is_preflight(self) -> bool:
        return self.method.upper() == "OPTIONS"


class RequestContext:
    """Request-scoped state and helpers available to hooks and handlers."""

    def __init__(self, request: InboundRequest, action: str):
        self.request = request
        self.action = action
        self.parameters = ParameterSource(
            request.raw_body, request.form, request.query,
        )

    @property
    def path(self) -> str:
        return self.request.path

    @property
    def is_ajax(self) -> bool:
        return self.request.headers.get("x-requested-with") == "XMLHttpRequest"

    def param(self, name: str | None = None, default: Any = None) -> Any:
        """One parameter by name, or every parameter when name is None."""
        if name is None:
            return self.parameters.resolve()
        return self.parameters.get(name, default)

    def require_params(self, *names: str) -> list[Any]:
        """Values for every name, in order. Raises on the first absent one."""
        values = []
        for name in names:
            value = self.parameters.get(name)
            if value is None:
                raise RequiredParamsError(name)
            values.append(value)
        return values

    def fail(
        self,
        message: str,
        code: int = 0,
        extra: dict[str, Any] | None = None,
        log: bool = True,
        final: bool = True,
        http_status: int | None = None,
    ) -> NoReturn:
        """Stop the request with a failure envelope."""
        raise DispatchError(
            message, code, http_status=http_status, extra=extra,
            final=final, log=log,
        )
