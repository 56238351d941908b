"""Project lifecycle state machine.

    draft ──┐
    deployed ├─ build requested ─> building ─┬─ success ─> deployed
    error ──┘                               └─ failure ─> error

Every transition is a conditional UPDATE on the current status, so two
concurrent build requests for one project cannot both enter `building`.
Deletion is not a state: it runs teardown and removes the record whatever
the current status.
"""

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..exceptions import (
    BuildError,
    InvalidTransitionError,
    ProjectBusyError,
    ProjectNotFoundError,
)
from ..logging_config import get_logger
from ..models import Project, ProjectStatus
from ..schemas import BuildResult, TeardownReport
from ..storage import ConversationStore

if TYPE_CHECKING:
    from .build import BuildOrchestrator
    from .teardown import TeardownCoordinator

logger = get_logger(__name__)

# target -> statuses it may be entered from
TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.BUILDING: frozenset(
        {ProjectStatus.DRAFT, ProjectStatus.DEPLOYED, ProjectStatus.ERROR}
    ),
    ProjectStatus.DEPLOYED: frozenset({ProjectStatus.BUILDING}),
    ProjectStatus.ERROR: frozenset({ProjectStatus.BUILDING}),
}


def can_transition(current: ProjectStatus | str, target: ProjectStatus | str) -> bool:
    return ProjectStatus(current) in TRANSITIONS.get(ProjectStatus(target), frozenset())


def _now() -> datetime:
    return datetime.now(UTC)


class ProjectLifecycle:
    """Owns every status change of a Project record."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    # === Records ===

    async def create(self, owner_id: str, name: str | None = None) -> Project:
        project = Project(
            owner_id=owner_id,
            name=(name or "").strip() or "Untitled Project",
            status=ProjectStatus.DRAFT.value,
        )
        self.session.add(project)
        await self.session.commit()
        await self.session.refresh(project)
        logger.info("project_created", project_id=project.id, owner_id=owner_id)
        return project

    async def get(self, project_id: str, owner_id: str | None = None) -> Project:
        """Load a project, optionally scoped to an owner.

        Raises:
            ProjectNotFoundError: If it does not exist or belongs to someone else.
        """
        project = await self.session.get(Project, project_id, populate_existing=True)
        if project is None or (owner_id is not None and project.owner_id != owner_id):
            raise ProjectNotFoundError(f"Project {project_id} not found")
        return project

    async def list_for_owner(self, owner_id: str) -> list[Project]:
        query = (
            select(Project)
            .where(Project.owner_id == owner_id)
            .order_by(Project.updated_at.desc(), Project.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    # === Transitions ===

    async def _transition(
        self, project_id: str, target: ProjectStatus, *conditions, **values
    ) -> Project:
        sources = [status.value for status in TRANSITIONS[target]]
        allowed = Project.status.in_(sources)
        if conditions:
            allowed = or_(allowed, *conditions)

        stmt = (
            update(Project)
            .where(and_(Project.id == project_id, allowed))
            .values(status=target.value, updated_at=_now(), **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()

        if result.rowcount == 0:
            current = await self.get(project_id)
            if target is ProjectStatus.BUILDING and current.status == ProjectStatus.BUILDING.value:
                raise ProjectBusyError(f"Project {project_id} is already building")
            raise InvalidTransitionError(
                f"Project {project_id} cannot go from {current.status} to {target.value}"
            )

        logger.info("project_status_changed", project_id=project_id, status=target.value)
        return await self.get(project_id)

    async def start_build(self, project_id: str) -> Project:
        """Enter `building`. Persisted before any pipeline step runs.

        A project stuck in `building` for longer than
        `build_stale_after_seconds` is treated as abandoned and may be
        restarted.

        Raises:
            ProjectBusyError: If a build is already running.
        """
        cutoff = _now() - timedelta(seconds=self.settings.build_stale_after_seconds)
        stale_build = and_(
            Project.status == ProjectStatus.BUILDING.value,
            Project.updated_at < cutoff,
        )
        return await self._transition(project_id, ProjectStatus.BUILDING, stale_build)

    async def mark_deployed(self, project_id: str, result: BuildResult) -> Project:
        return await self._transition(
            project_id,
            ProjectStatus.DEPLOYED,
            deployed_url=result.deployed_url,
            database_id=result.database_id,
            worker_name=result.script_name,
            last_error=None,
        )

    async def mark_failed(self, project_id: str, message: str) -> Project:
        """Enter `error`. Identifiers from an earlier deploy are left as they are."""
        return await self._transition(project_id, ProjectStatus.ERROR, last_error=message)

    # === Operations ===

    async def run_build(
        self, project: Project, orchestrator: "BuildOrchestrator", base_url: str
    ) -> BuildResult:
        """building -> deployed on success, building -> error on failure.

        Raises:
            ProjectBusyError: If a build is already running (status unchanged).
            BuildError: After the project has been marked `error`. Any other
                exception (e.g. recording the deployment failed) also marks the
                project `error` before propagating. A cancelled run stays
                `building` until the stale window passes.
        """
        project_id, name = project.id, project.name
        await self.start_build(project_id)
        try:
            result = await orchestrator.build(project_id, name, base_url)
            await self.mark_deployed(project_id, result)
        except BuildError as e:
            await self.mark_failed(project_id, str(e))
            raise
        except Exception as e:
            logger.error(
                "build_unexpected_failure",
                project_id=project_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self.session.rollback()
            await self.mark_failed(project_id, f"{type(e).__name__}: {e}")
            raise
        return result

    async def delete(
        self,
        project: Project,
        coordinator: "TeardownCoordinator",
        conversations: ConversationStore,
    ) -> TeardownReport:
        """Tear down deployed resources, then remove the project's records.

        If teardown raises, the records are kept so deletion can be retried.
        """
        project_id = project.id
        report = await coordinator.teardown(project_id, project.worker_name, project.database_id)
        await conversations.delete_for_project(project_id)
        await self.session.delete(project)
        await self.session.commit()
        logger.info("project_deleted", project_id=project_id, warnings=len(report.warnings))
        return report
