"""Parameter Binder — resolves each declared handler argument from request parameters.

Invariants:
    - Arguments resolved in declaration order; the first missing required one fails fast
    - Aliases tried: snake_case(name), name, camelCase(name), de-duplicated, in that order
    - A present falsy value (0, "", False) is supplied; only absent / None falls through
    - The missing-parameter error names the snake_case alias
"""

import re
from typing import Any

from api_dispatch.core.errors import MissingParameterError
from api_dispatch.core.handler_descriptor import ArgumentSpec, HandlerDescriptor
from api_dispatch.core.request_context import RequestContext
from api_dispatch.core.request_parameters import Found, ParameterSource

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])|(?<=[A-Z])([A-Z][a-z])")


def snake_case(name: str) -> str:
    """userId -> user_id, HTTPCode -> http_code, already_snake -> already_snake."""
    return _CAMEL_BOUNDARY.sub(
        lambda m: "_" + (m.group(1) or m.group(2)), name,
    ).lower()


def camel_case(name: str) -> str:
    """user_id -> userId. Leading underscores are kept."""
    stripped = name.lstrip("_")
    prefix = name[:len(name) - len(stripped)]
    head, *tail = stripped.split("_")
    return prefix + head + "".join(part[:1].upper() + part[1:] for part in tail)


def argument_aliases(name: str) -> list[str]:
    return list(dict.fromkeys((snake_case(name), name, camel_case(name))))


def resolve_argument(spec: ArgumentSpec, source: ParameterSource) -> Any:
    """Value for one argument. Raises MissingParameterError if required and absent."""
    for alias in argument_aliases(spec.name):
        found = source.lookup(alias)
        if isinstance(found, Found):
            return found.value
    if spec.has_default:
        return spec.default
    raise MissingParameterError(snake_case(spec.name))


def bind_arguments(
    descriptor: HandlerDescriptor, context: RequestContext,
) -> dict[str, Any]:
    """Keyword arguments for descriptor.func."""
    bound: dict[str, Any] = {}
    for spec in descriptor.arguments:
        if spec.inject_context:
            bound[spec.name] = context
            continue
        bound[spec.name] = resolve_argument(spec, context.parameters)
    return bound
