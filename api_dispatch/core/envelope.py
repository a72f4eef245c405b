"""Response Envelope — the single JSON wrapper every non-preflight request gets.

Invariants:
    - Success: {"success": true, **handler_result}
    - Failure: {"success": false, "final": ..., "error": ..., "code": ..., **extra}
    - Serialized pretty-printed (indent=4), non-ASCII preserved, UTF-8
    - Unknown values are stringified; non-str keys and reference cycles still raise
      TypeError / ValueError, which the dispatcher turns into a failure envelope
"""

import json
import time
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from api_dispatch.core.result import Err

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


def normalize_result(value: Any) -> dict[str, Any]:
    """Coerce a handler return value into a mapping that can be merged."""
    if not value:
        return {}
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return dict(value)
    return {"data": value}


def success_envelope(result: Any) -> dict[str, Any]:
    envelope: dict[str, Any] = {"success": True}
    envelope.update(normalize_result(result))
    return envelope


def failure_envelope(err: Err) -> dict[str, Any]:
    envelope: dict[str, Any] = {
        "success": False,
        "final": err.final,
        "error": err.message,
        "code": err.code,
    }
    envelope.update(err.extra)
    return envelope


def stamp_time(envelope: dict[str, Any]) -> dict[str, Any]:
    envelope["time"] = int(time.time())
    return envelope


def dumps(payload: Any) -> str:
    return json.dumps(payload, indent=4, ensure_ascii=False, default=str)


def serialize_envelope(envelope: Mapping[str, Any]) -> bytes:
    return dumps(envelope).encode("utf-8")
