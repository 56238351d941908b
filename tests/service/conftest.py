from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
import pytest

from appforge.api.database import get_async_session
from appforge.api.dependencies import get_artifact_store, get_gateway, get_generator
from appforge.api.main import app
from appforge.clients import PlatformGateway
from appforge.config import get_settings
from tests.fakes import FakeArtifactStore, FakeGenerator

PUBLIC_BASE_URL = "https://forge.example.com"


@pytest.fixture
def gateway():
    gw = AsyncMock(spec=PlatformGateway)
    gw.create_database.return_value = "db-1"
    return gw


@pytest.fixture
def artifacts():
    return FakeArtifactStore()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
async def client(settings, session_maker, gateway, artifacts, generator):
    """API client with the control plane, generator and blob store replaced."""
    settings = settings.model_copy(update={"public_base_url": PUBLIC_BASE_URL})

    async def override_session():
        async with session_maker() as session:
            yield session

    async def override_gateway():
        yield gateway

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_gateway] = override_gateway
    app.dependency_overrides[get_generator] = lambda: generator
    app.dependency_overrides[get_artifact_store] = lambda: artifacts

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-User-ID": "user-1"},
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
