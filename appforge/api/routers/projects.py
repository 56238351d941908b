"""Projects router."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
import structlog

from ...config import Settings, get_settings
from ...exceptions import BuildError, ProjectBusyError, ProjectNotFoundError, TeardownError
from ...models import Project
from ...pipeline import BuildOrchestrator, ProjectLifecycle, TeardownCoordinator
from ...storage import ArtifactStore, ConversationStore, project_prefix
from ..dependencies import (
    get_artifact_store,
    get_conversations,
    get_current_owner,
    get_lifecycle,
    get_orchestrator,
    get_teardown,
)
from ..schemas import BuildResponse, DeleteResponse, FileList, ProjectCreate, ProjectRead

logger = structlog.get_logger()

router = APIRouter(prefix="/projects", tags=["projects"])


async def get_owned_project(
    project_id: str,
    owner_id: str = Depends(get_current_owner),
    lifecycle: ProjectLifecycle = Depends(get_lifecycle),
) -> Project:
    try:
        return await lifecycle.get(project_id, owner_id)
    except ProjectNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Project not found"
        ) from e


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    owner_id: str = Depends(get_current_owner),
    lifecycle: ProjectLifecycle = Depends(get_lifecycle),
) -> Project:
    """Create a new project in draft."""
    return await lifecycle.create(owner_id, project_in.name)


@router.get("/", response_model=list[ProjectRead])
async def list_projects(
    owner_id: str = Depends(get_current_owner),
    lifecycle: ProjectLifecycle = Depends(get_lifecycle),
) -> list[Project]:
    """List the caller's projects, most recently updated first."""
    return await lifecycle.list_for_owner(owner_id)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project: Project = Depends(get_owned_project)) -> Project:
    """Get project by ID."""
    return project


@router.post("/{project_id}/build", response_model=BuildResponse)
async def build_project(
    request: Request,
    project: Project = Depends(get_owned_project),
    lifecycle: ProjectLifecycle = Depends(get_lifecycle),
    orchestrator: BuildOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> BuildResponse:
    """Generate and deploy the project from its conversation."""
    base_url = settings.public_base_url or str(request.base_url)
    try:
        result = await lifecycle.run_build(project, orchestrator, base_url.rstrip("/"))
    except ProjectBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except BuildError as e:
        logger.error("project_build_failed", project_id=project.id, stage=e.stage, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from e

    return BuildResponse(deployed_url=result.deployed_url)


@router.get("/{project_id}/files", response_model=FileList)
async def list_project_files(
    project: Project = Depends(get_owned_project),
    artifacts: ArtifactStore = Depends(get_artifact_store),
) -> FileList:
    """List generated files stored for the project."""
    prefix = project_prefix(project.id)
    keys = await artifacts.list(prefix)
    return FileList(files=[key[len(prefix) :] for key in keys])


@router.delete("/{project_id}", response_model=DeleteResponse)
async def delete_project(
    project: Project = Depends(get_owned_project),
    lifecycle: ProjectLifecycle = Depends(get_lifecycle),
    coordinator: TeardownCoordinator = Depends(get_teardown),
    conversations: ConversationStore = Depends(get_conversations),
) -> DeleteResponse:
    """Tear down deployed resources and remove the project."""
    project_id = project.id
    try:
        report = await lifecycle.delete(project, coordinator, conversations)
    except TeardownError as e:
        logger.error("project_delete_failed", project_id=project_id, error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from e

    return DeleteResponse(warnings=report.warnings)
