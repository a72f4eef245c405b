"""Request Dispatcher — runs one inbound request through the full API lifecycle.

Lifecycle:
    Received → CorsChecked → (ShortCircuited | Authorizing) → (Rejected | Binding)
    → (BindFailed | Invoking) → (Failed | Succeeded) → Responded

Invariants:
    - Preflight (OPTIONS) returns immediately: no logging, no envelope, no body
    - Every other request produces exactly one envelope and one egress log line
    - Each stage returns Ok | Err; _respond() is the only exit point
    - No exception escapes dispatch(); failures become envelopes
    - No request state is stored on the dispatcher — it can serve concurrent requests

Design Decisions:
    - Ingress log is written after the CORS check so preflight stays silent
    - Failure logs carry the redacted parameter view, the egress log carries the full envelope
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from api_dispatch.config import Settings
from api_dispatch.core.boundary_protocols import AuthorizationHook, LogSink, allow_all
from api_dispatch.core.cors_policy import cors_enabled, negotiate_cors
from api_dispatch.core.dispatch_options import ControllerPolicy, DispatchOptions
from api_dispatch.core.envelope import (
    JSON_CONTENT_TYPE, dumps, failure_envelope, normalize_result,
    serialize_envelope, stamp_time, success_envelope,
)
from api_dispatch.core.error_classifier import classify_failure
from api_dispatch.core.errors import AuthorizationRejectedError, UnknownActionError
from api_dispatch.core.parameter_binder import bind_arguments
from api_dispatch.core.request_context import InboundRequest, RequestContext
from api_dispatch.core.result import Err, Ok, Result
from api_dispatch.infrastructure.observability import StdlibLogSink
from api_dispatch.services.handler_registry import HandlerRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResponse:
    """What the host framework should send back."""
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


class RequestDispatcher:
    """Orchestrates authorization, binding, invocation and the response envelope."""

    def __init__(
        self,
        registry: HandlerRegistry,
        policy: ControllerPolicy | None = None,
        authorize: AuthorizationHook = allow_all,
        log_sink: LogSink | None = None,
        debug: bool = False,
        app_env: str = "prod",
    ):
        self._registry = registry
        self._policy = policy or ControllerPolicy()
        self._authorize_hook = authorize
        self._log_sink = log_sink or StdlibLogSink()
        self._debug = debug
        self._cors_enabled = cors_enabled(
            self._policy.allow_cors, self._policy.allow_cors_in_dev, app_env,
        )

    @classmethod
    def from_settings(
        cls,
        registry: HandlerRegistry,
        settings: Settings,
        authorize: AuthorizationHook = allow_all,
        log_sink: LogSink | None = None,
    ) -> "RequestDispatcher":
        return cls(
            registry,
            ControllerPolicy.from_settings(settings, registry.whitelist),
            authorize,
            log_sink,
            debug=settings.debug,
            app_env=settings.app_env,
        )

    @property
    def policy(self) -> ControllerPolicy:
        return self._policy

    def dispatch(
        self,
        request: InboundRequest,
        action: str,
        options: DispatchOptions | None = None,
    ) -> DispatchResponse:
        """Handle one request end to end. Never raises."""
        options = options or self._policy.options
        context = RequestContext(request, action)

        cors = negotiate_cors(request, self._cors_enabled, self._debug)
        if cors.short_circuit:
            return DispatchResponse(200, dict(cors.headers), None)

        if self._policy.log_request:
            self._log(
                f">> Api Request: {context.path}; "
                f"Params: {dumps(context.parameters.redacted())}",
                "info",
            )

        outcome = self._authorize(context, options)
        if isinstance(outcome, Ok):
            outcome = self._bind(context, options)
        if isinstance(outcome, Ok):
            descriptor, kwargs = outcome.value
            outcome = self._invoke(descriptor.func, kwargs, context, options)
        return self._respond(context, outcome, options, cors.headers)

    # ─── Stages ─────────────────────────────────────────────────

    def _authorize(self, context: RequestContext, options: DispatchOptions) -> Result:
        action = context.action
        if self._policy.is_whitelisted(action) or action in self._registry.whitelist:
            return Ok(None)
        try:
            if not self._authorize_hook(context):
                raise AuthorizationRejectedError()
        except Exception as exc:
            return self._fail(context, exc, options)
        return Ok(None)

    def _bind(self, context: RequestContext, options: DispatchOptions) -> Result:
        try:
            descriptor = self._registry.get(context.action)
            if descriptor is None:
                raise UnknownActionError(context.action)
            return Ok((descriptor, bind_arguments(descriptor, context)))
        except Exception as exc:
            return self._fail(context, exc, options)

    def _invoke(
        self,
        func: Any,
        kwargs: dict[str, Any],
        context: RequestContext,
        options: DispatchOptions,
    ) -> Result:
        try:
            value = func(**kwargs)
            if isinstance(value, Err):
                return self._fail(context, value, options)
            if isinstance(value, Ok):
                value = value.value
            return Ok(normalize_result(value))
        except Exception as exc:
            return self._fail(context, exc, options)

    def _fail(
        self,
        context: RequestContext,
        failure: BaseException | Err,
        options: DispatchOptions,
    ) -> Err:
        classification = classify_failure(failure, options, self._debug)
        if classification.should_log:
            self._log(
                "Api Request Error:\n"
                f"Path: {context.path}\n"
                f"Error: {classification.log_detail}\n"
                f"Request: {dumps(context.parameters.redacted())}",
                "error",
            )
        return classification.to_err()

    # ─── Exit ───────────────────────────────────────────────────

    def _respond(
        self,
        context: RequestContext,
        outcome: Result,
        options: DispatchOptions,
        cors_headers: dict[str, str],
    ) -> DispatchResponse:
        status_code, envelope = self._envelope(outcome, options)
        try:
            body = serialize_envelope(envelope)
        except (TypeError, ValueError) as exc:
            # handler result with non-str keys or cycles
            status_code, envelope = self._envelope(
                self._fail(context, exc, options), options,
            )
            body = serialize_envelope(envelope)

        if self._policy.log_response:
            self._log(
                f"<< Api Response: {context.path}; Params: {body.decode('utf-8')}",
                "info",
            )
        headers = dict(cors_headers)
        headers["Content-Type"] = JSON_CONTENT_TYPE
        return DispatchResponse(status_code, headers, body)

    def _envelope(
        self, outcome: Result, options: DispatchOptions,
    ) -> tuple[int, dict[str, Any]]:
        if isinstance(outcome, Err):
            status_code = outcome.http_status or options.error_status
            envelope = failure_envelope(outcome)
        else:
            status_code = 200
            envelope = success_envelope(outcome.value)
        if self._policy.include_time:
            stamp_time(envelope)
        return status_code, envelope

    def _log(self, message: str, level: str) -> None:
        try:
            self._log_sink.log(message, self._policy.log_category, level)
        except Exception as exc:
            logger.warning(f"Log sink failed: {exc}")
