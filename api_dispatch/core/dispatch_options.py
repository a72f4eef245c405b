"""Dispatch Options — error-handling switches per dispatch, and per-controller policy.

Invariants:
    - Both are frozen; a dispatch never mutates them
    - exception_messages maps an unhandled failure's code to a public message (masking only)
"""

from dataclasses import dataclass, field

from api_dispatch.config import Settings


@dataclass(frozen=True)
class DispatchOptions:
    """How failures are surfaced and logged for one dispatch."""
    mask_exceptions: bool = False
    exception_messages: dict[int, str] = field(default_factory=dict)
    log_handled: bool = True
    log_unhandled: bool = True
    trace_exceptions: bool = False
    error_status: int = 500

    @classmethod
    def from_settings(cls, settings: Settings) -> "DispatchOptions":
        return cls(
            mask_exceptions=settings.mask_exceptions,
            exception_messages=dict(settings.exception_messages),
            log_handled=settings.log_handled,
            log_unhandled=settings.log_unhandled,
            trace_exceptions=settings.trace_exceptions,
            error_status=settings.error_status,
        )


@dataclass(frozen=True)
class ControllerPolicy:
    """Settings shared by every action a dispatcher serves."""
    whitelist_actions: frozenset[str] = frozenset()
    allow_cors: bool = False
    allow_cors_in_dev: bool = False
    log_request: bool = True
    log_response: bool = True
    log_category: str = "api"
    include_time: bool = False
    options: DispatchOptions = field(default_factory=DispatchOptions)

    @classmethod
    def from_settings(
        cls, settings: Settings, whitelist_actions: frozenset[str] = frozenset(),
    ) -> "ControllerPolicy":
        return cls(
            whitelist_actions=frozenset(whitelist_actions),
            allow_cors=settings.allow_cors,
            allow_cors_in_dev=settings.allow_cors_in_dev,
            log_category=settings.log_category,
            include_time=settings.include_time,
            options=DispatchOptions.from_settings(settings),
        )

    def is_whitelisted(self, action: str) -> bool:
        return action in self.whitelist_actions
