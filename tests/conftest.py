# tests/conftest.py
import os

# Settings validate at import; seed the environment before any app module loads.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("AUTHSERVICE_SERVICE_HOST", "https://auth.example.test")
os.environ.setdefault("AUTHSERVICE_INTEGRATION_ID", "42")
os.environ.setdefault("AUTHSERVICE_INTEGRATION_API_KEY", "integration-secret")

import httpx  # noqa: E402
import pytest  # noqa: E402

from repository.token_store import MemoryTokenStore  # noqa: E402
from service.handshake_coordinator import HandshakeCoordinator  # noqa: E402
from service.identity_service_client import IdentityServiceClient  # noqa: E402
from service.session_issuer import SessionIssuer  # noqa: E402

HOST = "https://auth.example.test"
TMP_TTL = 600
SESSION_TTL = 60 * 24 * 3600


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class IdentityServiceStub:
    """
    httpx.MockTransport handler standing in for the identity service.
    Records every request; `fail_with` forces a status on flow calls.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/integrations/42":
            return httpx.Response(200, json={"id": 42, "name": "demo"})
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"success": False})
        if path == "/integrations/42/register":
            return httpx.Response(200, json={"SVCRegisterToken": "svc-register"})
        if path == "/integrations/42/restore":
            return httpx.Response(200, json={"SVCRestoreToken": "svc-restore"})
        if path == "/integrations/42/reset":
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404, json={"error": "unknown route"})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryTokenStore:
    return MemoryTokenStore(clock=clock)


@pytest.fixture
def identity_stub() -> IdentityServiceStub:
    return IdentityServiceStub()


@pytest.fixture
def remote(identity_stub: IdentityServiceStub) -> IdentityServiceClient:
    return IdentityServiceClient(
        host=HOST,
        integration_id="42",
        api_key="integration-secret",
        transport=httpx.MockTransport(identity_stub),
    )


@pytest.fixture
def sessions(store: MemoryTokenStore) -> SessionIssuer:
    return SessionIssuer(store, ttl_seconds=SESSION_TTL)


@pytest.fixture
def coordinator(
    store: MemoryTokenStore, remote: IdentityServiceClient, sessions: SessionIssuer
) -> HandshakeCoordinator:
    return HandshakeCoordinator(store, remote, sessions, tmp_ttl_seconds=TMP_TTL)
