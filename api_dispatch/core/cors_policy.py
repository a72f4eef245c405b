"""CORS Policy — per-request decision on CORS headers and preflight short-circuit.

Invariants:
    - Disabled → no CORS headers at all
    - Enabled, non-debug or no Origin → wildcard origin and headers
    - Enabled, debug, Origin present → echo origin, credentials on, fixed header allow-list
    - OPTIONS always short-circuits, whatever the CORS mode
"""

from dataclasses import dataclass, field

from api_dispatch.core.request_context import InboundRequest

DEBUG_ALLOWED_HEADERS = (
    "Accept",
    "Authorization",
    "Content-Type",
    "Origin",
    "X-Requested-With",
)


@dataclass(frozen=True)
class CorsDecision:
    headers: dict[str, str] = field(default_factory=dict)
    short_circuit: bool = False


def cors_enabled(allow_cors: bool, allow_cors_in_dev: bool, app_env: str) -> bool:
    return allow_cors or (allow_cors_in_dev and app_env == "dev")


def negotiate_cors(
    request: InboundRequest, enabled: bool, debug: bool,
) -> CorsDecision:
    headers: dict[str, str] = {}
    if enabled:
        origin = request.origin
        if debug and origin:
            headers = {
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Allow-Headers": ", ".join(DEBUG_ALLOWED_HEADERS),
                "Vary": "Origin",
            }
        else:
            headers = {
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            }
    return CorsDecision(headers, request.is_preflight)
