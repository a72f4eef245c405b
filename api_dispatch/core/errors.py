"""Error Hierarchy — typed, categorized exceptions for every dispatch failure mode.

Invariants:
    - Every error has a message (str), numeric code (int), category, severity, http_status
    - DispatchError messages are public: they go into the envelope verbatim, never masked
    - to_envelope() produces the failure envelope body ({success, final, error, code, ...extra})
    - Anything that is NOT a DispatchError is an unhandled failure (see error_classifier)

Design Decisions:
    - Single hierarchy with DispatchError base: the dispatcher catches the base, the
      classifier discriminates once
    - ApiError is the only class handler authors are expected to raise directly
"""

from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    AUTHORIZATION = "authorization"
    MISSING_PARAMETER = "missing_parameter"
    BUSINESS_RULE = "business_rule"
    ROUTING = "routing"
    INTERNAL = "internal"


class DispatchError(Exception):
    """Base exception for all failures the pipeline knows how to describe."""

    def __init__(
        self,
        message: str,
        code: int = 0,
        category: ErrorCategory = ErrorCategory.BUSINESS_RULE,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        http_status: int | None = None,
        extra: dict[str, Any] | None = None,
        final: bool = True,
        log: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.http_status = http_status
        self.extra = dict(extra or {})
        self.final = final
        self.log = log

    def to_envelope(self) -> dict[str, Any]:
        """Convert to the standardized failure envelope."""
        envelope: dict[str, Any] = {
            "success": False,
            "final": self.final,
            "error": self.message,
            "code": self.code,
        }
        envelope.update(self.extra)
        return envelope


# ─── Handler-raised ─────────────────────────────────────────────

class ApiError(DispatchError):
    """Expected business failure raised by a handler.

    The code is the public error code; it does not set the HTTP status.
    Pass http_status explicitly to override the configured error status.
    """
    def __init__(
        self,
        message: str,
        code: int = 0,
        extra: dict[str, Any] | None = None,
        http_status: int | None = None,
        final: bool = True,
    ):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE, ErrorSeverity.WARNING,
            http_status, extra, final,
        )


# ─── Pipeline-raised ────────────────────────────────────────────

class AuthorizationRejectedError(DispatchError):
    """Authorization hook returned False."""
    def __init__(self):
        super().__init__(
            "Invalid Validation Data", 401, ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, 401,
        )


class MissingParameterError(DispatchError):
    """A required handler argument could not be resolved."""
    def __init__(self, parameter: str):
        super().__init__(
            f"Required Param {parameter} is not set", 423,
            ErrorCategory.MISSING_PARAMETER, ErrorSeverity.WARNING, 423,
        )
        self.parameter = parameter


class RequiredParamsError(DispatchError):
    """A parameter demanded explicitly via RequestContext.require_params is absent."""
    def __init__(self, parameter: str):
        super().__init__(
            f"Required Param {parameter} is not set", 422,
            ErrorCategory.MISSING_PARAMETER, ErrorSeverity.WARNING, 422,
        )
        self.parameter = parameter


class UnknownActionError(DispatchError):
    """The resolved action name has no registered handler."""
    def __init__(self, action: str):
        super().__init__(
            f"Unable to resolve the request: {action}", 404,
            ErrorCategory.ROUTING, ErrorSeverity.ERROR, 404,
        )
        self.action = action
