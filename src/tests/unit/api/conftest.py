"""Fixtures for API endpoint tests."""

from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import jwt
import pytest
from fastapi.testclient import TestClient

from storagemanager.api.auth import get_auth_config
from storagemanager.api.dependencies import get_orchestrator, reset_orchestrator
from storagemanager.config import AuthConfig
from storagemanager.main import app

JWT_KEY = "unit-test-signing-key-with-enough-bytes"


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(jwt_key=JWT_KEY, algorithms=["HS256"])


@pytest.fixture
def mock_orchestrator() -> MagicMock:
    """Create mock orchestrator."""
    orchestrator = MagicMock()
    orchestrator.provider.name = "s3"
    orchestrator.create_organization_storage = AsyncMock()
    orchestrator.create_space_storage = AsyncMock()
    orchestrator.delete_organization_storage = AsyncMock()
    orchestrator.delete_space_storage = AsyncMock()
    return orchestrator


@pytest.fixture
def client(mock_orchestrator: MagicMock, auth_config: AuthConfig) -> Iterator[TestClient]:
    """Create test client with mocked orchestrator and HS256 token verification."""
    app.dependency_overrides[get_orchestrator] = lambda: mock_orchestrator
    app.dependency_overrides[get_auth_config] = lambda: auth_config

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
    reset_orchestrator()


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build an Authorization header carrying the given realm roles."""

    def _headers(*roles: str) -> dict[str, str]:
        token = jwt.encode(
            {"sub": "alice", "realm_access": {"roles": list(roles)}},
            JWT_KEY,
            algorithm="HS256",
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
