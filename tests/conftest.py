"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Generator

# Test configuration must be in place before core.config is imported
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STORE_BACKEND"] = "memory"
os.environ["FIREBASE_PROJECT_ID"] = "quecocino-test"

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from domain.entities.identity import IdentityRecord
from infrastructure.auth.firebase_provider import FirebaseAuthProvider
from infrastructure.store.memory_store import InMemoryDocumentStore

TEST_USER_ID = "kZx3Y0bq1cT9uVwQ2ePq7aLm4Hn2"


@pytest.fixture
def identity() -> IdentityRecord:
    """An identity as Firebase would issue it after Google sign-in."""
    return IdentityRecord(
        id=TEST_USER_ID,
        display_name="Ana",
        email="ana@x.com",
        avatar_url="http://x/p.png",
    )


@pytest.fixture
def auth_provider() -> FirebaseAuthProvider:
    """Create auth provider for testing."""
    return FirebaseAuthProvider(
        project_id="quecocino-test",
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: FirebaseAuthProvider, identity: IdentityRecord) -> str:
    """Create ID token for the test identity."""
    return str(auth_provider.create_token(identity))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    """Empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no overrides)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def app(
    memory_store: InMemoryDocumentStore,
    auth_provider: FirebaseAuthProvider,
) -> Generator[FastAPI, None, None]:
    """
    Create an app wired for tests.

    - Verifies tokens with the test HS256 secret
    - Reads and writes profiles in the ``memory_store`` fixture
    """
    from api.dependencies.auth import get_auth_provider
    from api.v1.dependencies import get_document_store
    from main import create_app

    app = create_app()

    def override_get_auth_provider() -> FirebaseAuthProvider:
        return auth_provider

    def override_get_document_store() -> InMemoryDocumentStore:
        return memory_store

    app.dependency_overrides[get_auth_provider] = override_get_auth_provider
    app.dependency_overrides[get_document_store] = override_get_document_store

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(
    app: FastAPI,
    auth_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client that sends the test identity's bearer token."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as c:
        yield c
