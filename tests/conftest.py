from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from appforge.config import Settings
from appforge.models import Base

CONTROL_PLANE = "https://api.cloudflare.com/client/v4"
ACCOUNT_ID = "acc-1"
NAMESPACE = "user-apps"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite://",
        cloudflare_account_id=ACCOUNT_ID,
        cloudflare_api_token="primary-token",
        control_plane_url=CONTROL_PLANE,
        dispatch_namespace=NAMESPACE,
        artifact_backend="local",
        artifact_local_path=str(tmp_path / "artifacts"),
        http_timeout=5.0,
    )


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session
