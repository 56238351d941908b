"""Conversation router: append to and read a project's chat transcript."""

from fastapi import APIRouter, Depends, Query, status

from ...models import Project
from ...schemas import ConversationMessage
from ...storage import ConversationStore
from ..dependencies import get_conversations
from ..schemas import MessageCreate, MessageRead
from .projects import get_owned_project

router = APIRouter(prefix="/projects", tags=["conversation"])


@router.post(
    "/{project_id}/messages", response_model=MessageRead, status_code=status.HTTP_201_CREATED
)
async def append_message(
    message_in: MessageCreate,
    project: Project = Depends(get_owned_project),
    conversations: ConversationStore = Depends(get_conversations),
) -> ConversationMessage:
    return await conversations.append(project.id, message_in.role, message_in.content.strip())


@router.get("/{project_id}/messages", response_model=list[MessageRead])
async def get_history(
    limit: int | None = Query(default=None, ge=1),
    project: Project = Depends(get_owned_project),
    conversations: ConversationStore = Depends(get_conversations),
) -> list[ConversationMessage]:
    """Chronological history; `limit` keeps only the most recent messages."""
    return await conversations.history(project.id, limit=limit)
