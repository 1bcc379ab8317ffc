"""
Test configuration and fixtures.
"""
import json
import os
import time
from typing import Any, Callable, Dict, List

import httpx
import jwt
import pytest

# Use a test-specific SQLite database file
TEST_DB_FILE = "test_event_bus.db"
TEST_JWT_SECRET = "test-secret"

# Set the environment variables BEFORE importing the app
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///./{TEST_DB_FILE}"
os.environ["SYNC_DATABASE_URL"] = f"sqlite:///./{TEST_DB_FILE}"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["JWT_SECRET"] = TEST_JWT_SECRET

# Now import after setting environment variables
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from fastapi.testclient import TestClient

from event_bus_service.main import app
from event_bus_service.api.dependencies import get_event_bus
from event_bus_service.core.config import settings
from event_bus_service.core.database import drop_db, init_db
from event_bus_service.core.registry import Destination, ServiceRegistry
from event_bus_service.services import EventBus

GRAPHQL_OK = {"data": {"events": {"id": "downstream-id"}}}


def make_token(
    secret: str = TEST_JWT_SECRET,
    expires_in: int = 3600,
    **claims: Any,
) -> str:
    """Sign a JWT shaped like the ones issued by the users service."""
    payload = {
        "id": "user-1",
        "userType": "customer",
        "email": "customer@example.com",
        "exp": int(time.time()) + expires_in,
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


class Downstream:
    """
    Fake network for the downstream services and the logger.

    Every request is recorded in order. Hosts can be configured to fail with:
    - an int: HTTP status code
    - "connect": connection error
    - "timeout": read timeout
    - "graphql": 200 with a GraphQL errors array
    - "not-json": 200 with a non-JSON body
    """

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.failures: Dict[str, Any] = {}
        self.on_request: Callable = None

    def fail(self, target: str, how: Any) -> None:
        """Make a host (or a full URL) fail."""
        self.failures[target] = how

    @property
    def hosts(self) -> List[str]:
        return [r["host"] for r in self.requests]

    def requests_to(self, host: str) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["host"] == host]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append({
            "host": request.url.host,
            "url": str(request.url),
            "path": request.url.path,
            "json": body,
        })
        if self.on_request is not None:
            await self.on_request(request)

        how = self.failures.get(str(request.url), self.failures.get(request.url.host))
        if how == "connect":
            raise httpx.ConnectError("connection refused", request=request)
        if how == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if how == "graphql":
            return httpx.Response(200, json={"errors": [{"message": "boom"}], "data": None})
        if how == "not-json":
            return httpx.Response(200, text="<html>oops</html>")
        if isinstance(how, int):
            return httpx.Response(how, json={"error": "failure"})

        if request.url.host == "logger":
            return httpx.Response(201, json={"ok": True})
        return httpx.Response(200, json=GRAPHQL_OK)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def downstream() -> Downstream:
    return Downstream()


@pytest.fixture
def registry() -> ServiceRegistry:
    """The default registry resolved from settings."""
    return ServiceRegistry.from_settings(settings)


@pytest.fixture
def small_registry() -> ServiceRegistry:
    return ServiceRegistry(
        destinations=(
            Destination(name="messages", url="http://messages:4001"),
            Destination(name="orders", url="http://orders:4003"),
            Destination(name="users", url="http://users:4005"),
        ),
        logger_url="http://logger:4006",
    )


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory bound to a fresh SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    await init_db(engine)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await drop_db(engine)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def clean_test_db():
    """Remove the application test database before and after each test."""
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)
    yield
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def client(downstream):
    """
    Test client whose event bus talks to the fake downstream network.
    The app already uses the test database via environment variables.
    """
    bus = EventBus.from_settings(settings, transport=downstream.transport)
    app.dependency_overrides[get_event_bus] = lambda: bus
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
