"""Conversation store backed by the project database."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import ChatMessage
from ..schemas import ConversationMessage, MessageRole


class ConversationStore:
    """Ordered (role, content, timestamp) sequence per project."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, project_id: str, role: MessageRole, content: str) -> ConversationMessage:
        message = ChatMessage(project_id=project_id, role=role, content=content)
        self.session.add(message)
        await self.session.commit()
        await self.session.refresh(message)
        return ConversationMessage(
            role=message.role, content=message.content, created_at=message.created_at
        )

    async def history(self, project_id: str, limit: int | None = None) -> list[ConversationMessage]:
        """Return messages oldest first.

        With `limit`, only the most recent `limit` messages are returned (still
        oldest first).
        """
        query = select(ChatMessage).where(ChatMessage.project_id == project_id)
        if limit is not None:
            query = query.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            query = query.limit(limit)
        else:
            query = query.order_by(ChatMessage.created_at, ChatMessage.id)

        rows = list((await self.session.execute(query)).scalars().all())
        if limit is not None:
            rows.reverse()
        return [
            ConversationMessage(role=row.role, content=row.content, created_at=row.created_at)
            for row in rows
        ]

    async def delete_for_project(self, project_id: str) -> None:
        await self.session.execute(delete(ChatMessage).where(ChatMessage.project_id == project_id))
        await self.session.commit()
