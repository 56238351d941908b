"""FastAPI dependencies: caller identity and pipeline wiring."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients import PlatformGateway
from ..config import Settings, get_settings
from ..exceptions import ConfigurationError
from ..generation import AppGenerator, LLMFactory
from ..pipeline import BuildOrchestrator, ProjectLifecycle, TeardownCoordinator
from ..storage import ArtifactStore, ConversationStore, build_artifact_store
from .database import get_async_session


async def get_current_owner(x_user_id: str = Header(..., alias="X-User-ID")) -> str:
    """Owner id of the caller. Session issuance happens upstream of this service."""
    owner_id = x_user_id.strip()
    if not owner_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user")
    return owner_id


def get_lifecycle(
    db: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
) -> ProjectLifecycle:
    return ProjectLifecycle(db, settings)


def get_conversations(db: AsyncSession = Depends(get_async_session)) -> ConversationStore:
    return ConversationStore(db)


def get_artifact_store(settings: Settings = Depends(get_settings)) -> ArtifactStore:
    try:
        return build_artifact_store(settings)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e


async def get_gateway(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[PlatformGateway, None]:
    """Gateway for one request. Missing credentials mean the pipeline never starts."""
    try:
        gateway = PlatformGateway.from_settings(settings)
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    async with gateway:
        yield gateway


def get_generator(settings: Settings = Depends(get_settings)) -> AppGenerator:
    try:
        return AppGenerator(LLMFactory.create_llm(settings))
    except ConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e


def get_orchestrator(
    gateway: PlatformGateway = Depends(get_gateway),
    generator: AppGenerator = Depends(get_generator),
    artifacts: ArtifactStore = Depends(get_artifact_store),
    conversations: ConversationStore = Depends(get_conversations),
    settings: Settings = Depends(get_settings),
) -> BuildOrchestrator:
    return BuildOrchestrator(
        gateway,
        generator,
        artifacts,
        conversations,
        bucket_name=settings.storage_bucket_name,
        context_messages=settings.code_context_messages,
    )


def get_teardown(
    gateway: PlatformGateway = Depends(get_gateway),
    artifacts: ArtifactStore = Depends(get_artifact_store),
) -> TeardownCoordinator:
    return TeardownCoordinator(gateway, artifacts)
