"""HTTP surface tests: routes, status mapping and the store-outage handler."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from controller.controller_dependencies import handshake_rate_limiter
from main import app
from util.errors import InfrastructureError


@pytest_asyncio.fixture
async def client(coordinator):
    app.state.coordinator = coordinator
    app.dependency_overrides[handshake_rate_limiter] = lambda: None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_healthz(client) -> None:
    res = await client.get("/healthz")
    assert res.status_code == 200
    assert res.json() == {"ok": True}


@pytest.mark.asyncio
async def test_register_flow_over_http(client) -> None:
    init = await client.post("/api/v1/register/init", json={"email": "a@b.com"})
    assert init.status_code == 200
    body = init.json()
    assert body["success"] is True
    assert body["uploadUrl"] == "https://auth.example.test/upload/register"
    assert body["remoteFlowToken"] == "svc-register"
    token = body["tokenId"]

    upload = await client.post(
        "/api/v1/register/upload", json={"token": token, "apiKey": "key123"}
    )
    assert upload.status_code == 200
    assert upload.json() == {"success": True}

    again = await client.post(
        "/api/v1/register/upload", json={"token": token, "apiKey": "key123"}
    )
    assert again.status_code == 409
    assert again.json() == {"success": False, "error": "not-pending"}

    session = await client.post("/api/v1/register/session", json={"token": token})
    assert session.status_code == 200
    assert session.json()["expiresIn"] == 60 * 24 * 3600
    assert session.json()["sessionId"]

    replay = await client.post("/api/v1/register/session", json={"token": token})
    assert replay.status_code == 409
    assert replay.json() == {"success": False, "error": "already-consumed"}


@pytest.mark.asyncio
async def test_reset_confirm_over_http(client) -> None:
    init = await client.post("/api/v1/reset/init", json={"email": "a@b.com"})
    assert init.json() == {
        "success": True,
        "uploadUrl": "https://auth.example.test/upload/reset",
    }

    confirm = await client.post("/api/v1/reset/confirm")
    assert confirm.status_code == 200
    token = confirm.json()["tokenId"]

    upload = await client.post(
        "/api/v1/reset/upload", json={"token": token, "apiKey": "new-key"}
    )
    assert upload.json() == {"success": True}


@pytest.mark.asyncio
async def test_session_for_unknown_token_is_404(client) -> None:
    res = await client.post("/api/v1/restore/session", json={"token": "nope"})
    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "not-ready"}


@pytest.mark.asyncio
async def test_remote_failure_maps_to_502(client, identity_stub) -> None:
    identity_stub.fail_with = 500
    res = await client.post("/api/v1/restore/init", json={"email": "a@b.com"})
    assert res.status_code == 502
    assert res.json() == {"success": False, "error": "remote-service"}


@pytest.mark.asyncio
async def test_invalid_input_maps_to_422(client) -> None:
    res = await client.post("/api/v1/register/init", json={"email": "nope"})
    assert res.status_code == 422
    assert res.json() == {"success": False, "error": "invalid-input"}


@pytest.mark.asyncio
async def test_unknown_flow_is_rejected(client) -> None:
    res = await client.post("/api/v1/signup/init", json={"email": "a@b.com"})
    assert res.status_code == 422


@pytest.mark.asyncio
async def test_store_outage_maps_to_503(client, coordinator) -> None:
    coordinator.exchange = AsyncMock(side_effect=InfrastructureError("down"))

    res = await client.post("/api/v1/register/session", json={"token": "t"})

    assert res.status_code == 503
    assert res.json()["error"] == "store-unavailable"
