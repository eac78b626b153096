"""
Shared test fixtures and configuration.
"""

import pytest
import os
from unittest.mock import AsyncMock, MagicMock

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/health_navigator_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from fastapi.testclient import TestClient

from health_navigator.config import Settings
from health_navigator.core.container import ServiceContainer
from health_navigator.llm.base import LLMProvider, LLMResponse
from health_navigator.main import create_app
from health_navigator.storage import LocalDocumentStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        secret_key="test-secret-key-for-testing",
        app_id="test-app",
        local_storage_path=str(tmp_path / "data"),
        google_client_id="test-client-id.apps.googleusercontent.com",
        google_redirect_uri="http://localhost:3000",
        gemini_api_key=None,
        log_file_enabled=False,
        log_console_enabled=False,
        log_api_requests=True,
    )


@pytest.fixture
def document_store(tmp_path):
    return LocalDocumentStore(str(tmp_path / "store"))


@pytest.fixture
def mock_llm():
    """LLM provider whose generate() is an AsyncMock returning a fixed answer."""
    provider = MagicMock(spec=LLMProvider)
    provider.generate = AsyncMock(return_value=LLMResponse(content="Stay hydrated.", model="gemini-test"))
    return provider


@pytest.fixture
def container(settings, mock_llm):
    return ServiceContainer(
        settings=settings,
        document_store=LocalDocumentStore(settings.local_storage_path),
        llm_provider=mock_llm,
    )


@pytest.fixture
def client(settings, container):
    with TestClient(create_app(settings, container)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    """Sign in anonymously and return auth headers."""
    response = client.post("/auth/session", json={})
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def mock_async_client(mock_response=None, side_effect=None):
    """Build a stand-in for ``httpx.AsyncClient`` whose post() returns mock_response."""
    mock_instance = AsyncMock()
    if side_effect is not None:
        mock_instance.post.side_effect = side_effect
    else:
        mock_instance.post.return_value = mock_response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    return mock_instance


def json_response(status_code, payload):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = payload
    return mock_response
