"""Build orchestration: conversation -> generated app -> live tenant deployment."""

from collections.abc import Awaitable
import secrets
from typing import Protocol, TypeVar

from ..clients import PlatformGateway
from ..exceptions import BuildError
from ..generation.parser import ARTIFACT_FILES
from ..logging_config import bind_project, get_logger
from ..schemas import (
    AppPlan,
    BuildResult,
    ConversationMessage,
    GeneratedArtifacts,
    ServiceDeployment,
)
from ..storage import ArtifactStore, project_prefix
from .migrations import split_statements

logger = get_logger(__name__)

T = TypeVar("T")

# Independent of the platform's own auth secret
DEPLOYMENT_SECRET_BYTES = 32


class ConversationSource(Protocol):
    async def history(
        self, project_id: str, limit: int | None = None
    ) -> list[ConversationMessage]: ...


class Generator(Protocol):
    async def produce_plan(self, conversation: list[ConversationMessage]) -> AppPlan: ...

    async def produce_code(
        self, plan: AppPlan, recent_conversation: list[ConversationMessage]
    ) -> GeneratedArtifacts: ...


def resource_name(project_id: str) -> str:
    """Deterministic name shared by a project's database and script."""
    return f"app-{project_id}"


def deployed_url(base_url: str, project_id: str) -> str:
    return f"{base_url.rstrip('/')}/apps/{project_id}/"


class BuildOrchestrator:
    """Runs one build as a strictly sequential chain of steps.

    The first failing step aborts the run with a BuildError naming the step.
    Nothing is retried and nothing already provisioned is rolled back.
    """

    def __init__(
        self,
        gateway: PlatformGateway,
        generator: Generator,
        artifacts: ArtifactStore,
        conversations: ConversationSource,
        *,
        bucket_name: str,
        context_messages: int = 10,
    ):
        if context_messages < 1:
            raise ValueError(f"context_messages must be at least 1, got {context_messages}")
        self.gateway = gateway
        self.generator = generator
        self.artifacts = artifacts
        self.conversations = conversations
        self.bucket_name = bucket_name
        self.context_messages = context_messages

    async def build(self, project_id: str, project_name: str, base_url: str) -> BuildResult:
        """Generate, provision and deploy a project.

        Args:
            project_id: Project to build.
            project_name: Display name, used for logging only.
            base_url: External base URL under which tenant apps are routed.

        Returns:
            Deployed URL plus the database and script identifiers.

        Raises:
            BuildError: On the first failing step, with the cause chained.
        """
        with bind_project(project_id):
            logger.info("build_started", project_name=project_name)

            conversation = await self._stage(
                "conversation", self.conversations.history(project_id)
            )
            plan = await self._stage("plan", self.generator.produce_plan(conversation))
            recent = conversation[-self.context_messages :]
            generated = await self._stage("code", self.generator.produce_code(plan, recent))
            await self._stage("artifacts", self.store_artifacts(project_id, generated))

            name = resource_name(project_id)
            database_id = await self._stage("database", self.gateway.create_database(name))
            await self._stage("migration", self.apply_migration(database_id, generated.migration))

            deployment = ServiceDeployment(
                script_name=name,
                script_content=generated.script,
                document=generated.document,
                database_id=database_id,
                bucket_name=self.bucket_name,
                secret=secrets.token_hex(DEPLOYMENT_SECRET_BYTES),
            )
            await self._stage("deploy", self.gateway.deploy_service(deployment))

            result = BuildResult(
                deployed_url=deployed_url(base_url, project_id),
                database_id=database_id,
                script_name=name,
            )
            logger.info(
                "build_completed",
                deployed_url=result.deployed_url,
                database_id=database_id,
                script_name=name,
            )
            return result

    async def _stage(self, stage: str, step: Awaitable[T]) -> T:
        logger.debug("build_stage_started", stage=stage)
        try:
            return await step
        except Exception as e:
            logger.warning(
                "build_stage_failed", stage=stage, error=str(e), error_type=type(e).__name__
            )
            raise BuildError(stage, str(e)) from e

    async def store_artifacts(self, project_id: str, generated: GeneratedArtifacts) -> None:
        """Write the three artifacts, replacing the previous build's copies."""
        prefix = project_prefix(project_id)
        for file_name, field in ARTIFACT_FILES.items():
            await self.artifacts.put(f"{prefix}{file_name}", getattr(generated, field))

    async def apply_migration(self, database_id: str, migration: str) -> int:
        """Run each statement in order, waiting for each before the next."""
        statements = split_statements(migration)
        for index, sql in enumerate(statements, start=1):
            logger.debug("migration_statement", index=index, total=len(statements))
            await self.gateway.run_statement(database_id, sql)
        logger.info("migration_applied", database_id=database_id, statements=len(statements))
        return len(statements)
