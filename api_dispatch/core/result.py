"""Dispatch Result — tagged Ok | Err values threaded through the pipeline stages.

Invariants:
    - Every pipeline stage returns exactly one Ok or Err
    - Err carries a FailureKind plus everything needed to build the envelope
    - Handlers may return Ok / Err directly instead of raising
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class FailureKind(str, Enum):
    """Terminal failure states of the dispatch lifecycle."""
    REJECTED = "rejected"
    BIND_FAILED = "bind_failed"
    API_ERROR = "api_error"
    UNHANDLED = "unhandled"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: FailureKind
    message: str
    code: int = 0
    extra: dict[str, Any] = field(default_factory=dict)
    http_status: int | None = None
    final: bool = True

    @classmethod
    def api(
        cls,
        message: str,
        code: int = 0,
        extra: dict[str, Any] | None = None,
        http_status: int | None = None,
    ) -> "Err":
        """Handler-facing shortcut equivalent to raising ApiError."""
        return cls(FailureKind.API_ERROR, message, code, dict(extra or {}), http_status)


Result = Ok[Any] | Err
