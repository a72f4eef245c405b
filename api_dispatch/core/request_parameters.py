"""Request Parameters — merged, cached view over body, form and query input.

Invariants:
    - Merge precedence: JSON body < form fields < query string (query wins)
    - resolve() computes once per ParameterSource instance, then returns the cached dict
    - A body that is empty, invalid JSON, or not a JSON object contributes nothing
    - redacted() never mutates the cached parameters
    - get() never raises; absence is signaled by returning the supplied default

Design Decisions:
    - Presence is explicit (lookup() returns NOT_FOUND), so 0 / "" / False reached through
      a dotted path count as supplied
    - A key present with a None value is treated as absent
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any

REDACTED = "***"
REDACTED_KEYS = frozenset({"pass", "password"})


class _NotFound:
    """Sentinel for an absent parameter."""

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


@dataclass(frozen=True)
class Found:
    """A parameter that is present, possibly with a falsy value."""
    value: Any


def decode_json_body(raw_body: bytes | str | None) -> dict[str, Any]:
    """Decode a raw request body into a dict, or {} if it is not a JSON object."""
    if not raw_body:
        return {}
    try:
        decoded = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError):
        return {}
    return decoded if isinstance(decoded, dict) else {}


def redact(value: Any) -> Any:
    """Deep copy of value with every pass/password key replaced by the placeholder."""
    if isinstance(value, Mapping):
        return {
            key: REDACTED if str(key).lower() in REDACTED_KEYS else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact(item) for item in value]
    return value


def _walk_path(params: Mapping[str, Any], path: str) -> Found | _NotFound:
    current: Any = params
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return NOT_FOUND
            current = current[part]
        elif isinstance(current, list) and part.isdigit():
            index = int(part)
            if index >= len(current):
                return NOT_FOUND
            current = current[index]
        else:
            return NOT_FOUND
    if current is None:
        return NOT_FOUND
    return Found(current)


class ParameterSource:
    """Per-request parameter lookup. Never share an instance between requests."""

    def __init__(
        self,
        raw_body: bytes | str | None = None,
        form: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
    ):
        self._raw_body = raw_body
        self._form = form or {}
        self._query = query or {}

    @cached_property
    def _params(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        merged.update(decode_json_body(self._raw_body))
        merged.update(self._form)
        merged.update(self._query)
        return merged

    def resolve(self) -> dict[str, Any]:
        """All merged parameters."""
        return self._params

    def lookup(self, name: str) -> Found | _NotFound:
        """Exact key first, then dotted-path traversal."""
        params = self._params
        if params.get(name) is not None:
            return Found(params[name])
        if "." not in name:
            return NOT_FOUND
        return _walk_path(params, name)

    def get(self, name: str, default: Any = None) -> Any:
        found = self.lookup(name)
        if isinstance(found, Found):
            return found.value
        return default

    def has(self, name: str) -> bool:
        return isinstance(self.lookup(name), Found)

    def redacted(self) -> dict[str, Any]:
        """Logging view — never use for binding."""
        return redact(self._params)
