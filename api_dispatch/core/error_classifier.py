"""Error Classifier — maps any failure into a stable, envelope-ready description.

Invariants:
    - DispatchError (incl. ApiError): message and code verbatim, never masked
    - Unhandled failure, masked: public message is "Request Error" unless the failure's
      code has an entry in options.exception_messages
    - Unhandled failure, unmasked: raw message plus `type` (and `trace` when debug) extras
    - Unhandled failures are logged with type, message and trace whatever the masking
    - Pure: no IO, the dispatcher decides where log_detail goes
"""

import traceback
from dataclasses import dataclass, field
from typing import Any

from api_dispatch.core.dispatch_options import DispatchOptions
from api_dispatch.core.errors import DispatchError, ErrorCategory
from api_dispatch.core.result import Err, FailureKind

MASKED_MESSAGE = "Request Error"

_KIND_BY_CATEGORY = {
    ErrorCategory.AUTHORIZATION: FailureKind.REJECTED,
    ErrorCategory.MISSING_PARAMETER: FailureKind.BIND_FAILED,
    ErrorCategory.ROUTING: FailureKind.BIND_FAILED,
}


@dataclass(frozen=True)
class FailureClassification:
    kind: FailureKind
    public_message: str
    code: int
    extra: dict[str, Any] = field(default_factory=dict)
    should_log: bool = True
    http_status: int = 500
    final: bool = True
    log_detail: str = ""

    def to_err(self) -> Err:
        return Err(
            self.kind, self.public_message, self.code, dict(self.extra),
            self.http_status, self.final,
        )


def format_trace(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _int_attr(obj: object, *names: str) -> int | None:
    for name in names:
        value = getattr(obj, name, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def classify_failure(
    failure: BaseException | Err, options: DispatchOptions, debug: bool = False,
) -> FailureClassification:
    if isinstance(failure, Err):
        return _classify_returned(failure, options)
    if isinstance(failure, DispatchError):
        return _classify_handled(failure, options)
    return _classify_unhandled(failure, options, debug)


def _classify_returned(err: Err, options: DispatchOptions) -> FailureClassification:
    return FailureClassification(
        kind=err.kind,
        public_message=err.message,
        code=err.code,
        extra=dict(err.extra),
        should_log=options.log_handled,
        http_status=err.http_status or options.error_status,
        final=err.final,
        log_detail=err.message,
    )


def _classify_handled(
    exc: DispatchError, options: DispatchOptions,
) -> FailureClassification:
    kind = _KIND_BY_CATEGORY.get(exc.category, FailureKind.API_ERROR)
    # pipeline-raised rejections are logged unless the error itself opts out
    should_log = exc.log if kind is not FailureKind.API_ERROR else (
        exc.log and options.log_handled
    )
    detail = exc.message
    if options.trace_exceptions and exc.__traceback__ is not None:
        detail += f"\nTrace: {format_trace(exc)}"
    return FailureClassification(
        kind=kind,
        public_message=exc.message,
        code=exc.code,
        extra=dict(exc.extra),
        should_log=should_log,
        http_status=exc.http_status or options.error_status,
        final=exc.final,
        log_detail=detail,
    )


def _classify_unhandled(
    exc: BaseException, options: DispatchOptions, debug: bool,
) -> FailureClassification:
    code = _int_attr(exc, "code") or 0
    type_name = type(exc).__name__
    trace = format_trace(exc)
    extra: dict[str, Any] = {}
    if options.mask_exceptions:
        message = options.exception_messages.get(code, MASKED_MESSAGE)
    else:
        message = str(exc)
        extra["type"] = type_name
        if debug:
            extra["trace"] = trace
    return FailureClassification(
        kind=FailureKind.UNHANDLED,
        public_message=message,
        code=code,
        extra=extra,
        should_log=options.log_unhandled,
        http_status=_int_attr(exc, "http_status", "status_code") or options.error_status,
        log_detail=f"{type_name}: {exc}\nTrace: {trace}",
    )
