"""Dispatch Route — end-to-end tests through FastAPI with an httpx ASGI client.

Tests cover:
    - JSON body, form body and query string reach handler arguments
    - Preflight OPTIONS returns an empty body with CORS headers
    - Failure envelopes and status codes survive the HTTP adapter
    - Malformed multipart bodies still reach the dispatcher
    - Unknown routes and wrong methods get envelope-shaped errors
    - Health probe and the default demo app
"""

import pytest
from httpx import ASGITransport, AsyncClient

from api_dispatch.config import Settings
from api_dispatch.core.errors import ApiError
from api_dispatch.main import create_app
from api_dispatch.services.handler_registry import HandlerRegistry


def _registry() -> HandlerRegistry:
    registry = HandlerRegistry()

    @registry.action()
    def greet(name, excited=False):
        return {"message": f"Hello, {name}{'!' if excited else '.'}"}

    @registry.action()
    def echo(ctx: "RequestContext"):
        return {"params": ctx.param()}

    @registry.action()
    def missing_item(itemId):
        raise ApiError("Not found", 404)

    @registry.action(whitelist=True)
    def public():
        return {"public": True}

    return registry


@pytest.fixture
def settings():
    return Settings(
        _env_file=None, allow_cors=True, log_format="text", app_env="test",
    )


@pytest.fixture
async def client(settings, log_sink):
    app = create_app(
        _registry(),
        authorize=lambda context: context.param("token") == "ok",
        settings=settings,
        log_sink=log_sink,
    )
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.mark.asyncio
async def test_json_body_binds_arguments(client):
    response = await client.post(
        "/api/greet?token=ok", json={"name": "Zoë", "excited": True},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json; charset=UTF-8"
    assert response.json() == {"success": True, "message": "Hello, Zoë!"}
    assert "Zoë" in response.text


@pytest.mark.asyncio
async def test_form_body_binds_arguments(client):
    response = await client.post(
        "/api/greet", data={"name": "Form", "token": "ok"},
    )
    assert response.json()["message"] == "Hello, Form."


@pytest.mark.asyncio
async def test_query_overrides_body(client):
    response = await client.post(
        "/api/echo?token=ok&mode=query", json={"mode": "body", "keep": 1},
    )
    assert response.json()["params"] == {"mode": "query", "keep": 1, "token": "ok"}


@pytest.mark.asyncio
async def test_preflight_is_empty(client, log_sink):
    response = await client.options(
        "/api/greet", headers={"Origin": "https://ui.test"},
    )
    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert log_sink.records == []


@pytest.mark.asyncio
async def test_unauthorized_request(client):
    response = await client.get("/api/greet?name=x")
    assert response.status_code == 401
    assert response.json()["error"] == "Invalid Validation Data"


@pytest.mark.asyncio
async def test_whitelisted_action_needs_no_token(client):
    response = await client.get("/api/public")
    assert response.status_code == 200
    assert response.json() == {"success": True, "public": True}


@pytest.mark.asyncio
async def test_missing_parameter_status(client):
    response = await client.get("/api/greet?token=ok")
    assert response.status_code == 423
    assert "name" in response.json()["error"]


@pytest.mark.asyncio
async def test_api_error_status_and_body(client):
    response = await client.get("/api/missing_item?token=ok&item_id=3")
    assert response.status_code == 500
    assert response.json() == {
        "success": False, "final": True, "error": "Not found", "code": 404,
    }


@pytest.mark.asyncio
async def test_cors_headers_on_regular_response(client):
    response = await client.get("/api/public")
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-headers"] == "*"


@pytest.mark.asyncio
async def test_malformed_multipart_body_still_dispatches(client, log_sink):
    response = await client.post(
        "/api/public",
        content=b"junk",
        headers={"content-type": "multipart/form-data"},
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "public": True}
    egress = [
        m for m in log_sink.messages("info") if m.startswith("<< Api Response")
    ]
    assert len(egress) == 1


@pytest.mark.asyncio
async def test_unknown_route_gets_envelope(client):
    response = await client.get("/nowhere")
    assert response.status_code == 404
    assert response.headers["content-type"] == "application/json; charset=UTF-8"
    body = response.json()
    assert body["success"] is False
    assert body["final"] is True
    assert body["code"] == 404


@pytest.mark.asyncio
async def test_wrong_method_keeps_allow_header(client):
    response = await client.post("/health/")
    assert response.status_code == 405
    assert "GET" in response.headers["allow"]
    assert response.json()["code"] == 405


@pytest.mark.asyncio
async def test_health_probe(client):
    response = await client.get("/health/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_default_app_ping():
    from api_dispatch.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        response = await c.get("/api/ping")
    assert response.status_code == 200
    assert response.json() == {"success": True, "pong": True}
