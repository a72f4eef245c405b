"""Handler Descriptor — declarative description of a handler's argument list.

Invariants:
    - Argument order is declaration order; binding follows it
    - required == (no default declared); a declared default of None is still optional
    - Descriptors are built at registration time, never while a request is dispatching
    - Positional-only parameters are rejected at registration (binding is by keyword)

Design Decisions:
    - from_callable() reads inspect.signature once; explicit ArgumentSpec lists are
      equally valid for handlers whose signature should not be trusted
    - A parameter annotated as RequestContext is injected, not bound from input
"""

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from api_dispatch.core.request_context import RequestContext


class _NoDefault:
    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Any = _NoDefault()

_SKIPPED_KINDS = (
    inspect.Parameter.VAR_POSITIONAL,
    inspect.Parameter.VAR_KEYWORD,
)


@dataclass(frozen=True)
class ArgumentSpec:
    """One declared handler argument."""
    name: str
    default: Any = NO_DEFAULT
    inject_context: bool = False

    @property
    def required(self) -> bool:
        return self.default is NO_DEFAULT and not self.inject_context

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT


@dataclass(frozen=True)
class HandlerDescriptor:
    """A named operation plus its ordered argument list."""
    name: str
    func: Callable[..., Any]
    arguments: tuple[ArgumentSpec, ...] = field(default_factory=tuple)

    @classmethod
    def from_callable(
        cls, name: str, func: Callable[..., Any],
    ) -> "HandlerDescriptor":
        """Describe func from its signature."""
        arguments = []
        for parameter in inspect.signature(func).parameters.values():
            if parameter.kind in _SKIPPED_KINDS:
                continue
            if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
                raise ValueError(
                    f"Handler '{name}' has positional-only parameter "
                    f"'{parameter.name}'; handlers are called with keyword arguments"
                )
            default = (
                NO_DEFAULT if parameter.default is inspect.Parameter.empty
                else parameter.default
            )
            arguments.append(ArgumentSpec(
                parameter.name, default, _is_context(parameter.annotation),
            ))
        return cls(name, func, tuple(arguments))


def _is_context(annotation: Any) -> bool:
    return annotation is RequestContext or annotation == "RequestContext"
