"""
Pytest fixtures for testing.

Provides:
- In-memory document store shared by service and HTTP tests
- Toggle service bound to that store
- Test client with auth helpers
- Seed helpers for platforms, segments, groups and features
"""

import json
from typing import Any, AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from toggles.main import app
from toggles.core.targeting import ToggleService
from toggles.implementations.storage.memory import MemoryDocumentStore
from toggles.services.auth import AuthService, Identity
from toggles.utils.storage import get_store


TEST_EMAIL = "ops@example.com"


@pytest.fixture
def store() -> MemoryDocumentStore:
    """Fresh in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def service(store: MemoryDocumentStore) -> ToggleService:
    return ToggleService(store)


@pytest.fixture
def user() -> Identity:
    return Identity(user_email=TEST_EMAIL)


@pytest.fixture
def stored(store: MemoryDocumentStore) -> Callable[[str], Any]:
    """Decode a stored document straight from the store."""

    def read(key: str) -> Any:
        return json.loads(store.documents[key])

    return read


# ============ Seed Helpers ============


@pytest_asyncio.fixture
async def seeded(service: ToggleService, user: Identity) -> ToggleService:
    """
    Service with one platform, two segments, one group and one feature.

    web
      segments: country [IN, US, MX], tier [gold, silver]
      checkout / new_cart (boolean, false)
    """
    await service.add_platform(["web"])
    await service.create_segment("country", "Country code", ["IN", "US", "MX"])
    await service.create_segment("tier", "Subscription tier", ["gold", "silver"])
    await service.create_group("web", {"id": "checkout", "description": "Checkout flow"}, user)
    await service.create_feature(
        "web",
        {
            "id": "new_cart",
            "groupId": "checkout",
            "description": "New cart page",
            "type": "boolean",
            "value": False,
        },
        user,
    )
    return service


# ============ HTTP Client ============


@pytest_asyncio.fixture(scope="function")
async def client(store: MemoryDocumentStore) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with document store override.
    """
    app.dependency_overrides[get_store] = lambda: store

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# ============ Auth Helpers ============


def get_auth_headers(email: str = TEST_EMAIL) -> dict[str, str]:
    """Helper to get auth headers for any user email."""
    auth_service = AuthService()
    token = auth_service.create_access_token(email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get auth headers for the test user."""
    return get_auth_headers()
