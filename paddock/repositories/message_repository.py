from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from paddock.core.clock import utcnow
from paddock.models import Message
from paddock.schemas.message import MessageType

from .base import BaseRepository


class MessageRepository(BaseRepository):
    def __init__(self, session: AsyncSession):
        super().__init__(session)

    async def create_message(
        self,
        conversation_id: UUID,
        sender_id: UUID,
        content: str,
        *,
        message_type: MessageType = MessageType.TEXT,
        reply_to_id: UUID | None = None,
        attachments: list[dict] | None = None,
        created_at: datetime | None = None,
    ) -> Message:
        """Creates a new unread message."""
        now = created_at or utcnow()
        message = Message(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            message_type=message_type,
            reply_to_id=reply_to_id,
            attachments=attachments,
            is_read=False,
            created_at=now,
            updated_at=now,
        )
        self.session.add(message)
        await self.session.flush()
        return message

    async def get_message_by_id(self, message_id: UUID) -> Message | None:
        """Retrieves a specific message by its ID."""
        stmt = select(Message).filter(Message.id == message_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_recent_messages(
        self,
        conversation_id: UUID,
        limit: int,
        visible_since: datetime | None = None,
    ) -> list[Message]:
        """
        Returns the newest ``limit`` messages of a conversation, oldest first,
        with senders and replied-to messages loaded.
        """
        stmt = select(Message).filter(Message.conversation_id == conversation_id)
        if visible_since is not None:
            stmt = stmt.filter(Message.created_at >= visible_since)
        stmt = (
            stmt.options(
                selectinload(Message.sender),
                selectinload(Message.replied_to).selectinload(Message.sender),
            )
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def list_conversation_messages(
        self, conversation_id: UUID
    ) -> Sequence[Message]:
        """Lists every message of a conversation in chronological order."""
        stmt = (
            select(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_latest_message(self, conversation_id: UUID) -> Message | None:
        stmt = (
            select(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def mark_messages_read(
        self, conversation_id: UUID, reader_id: UUID, read_at: datetime
    ) -> int:
        """Marks the other party's unread messages as read. Returns how many changed."""
        stmt = (
            update(Message)
            .where(
                Message.conversation_id == conversation_id,
                Message.sender_id != reader_id,
                Message.is_read.is_(False),
            )
            .values(is_read=True, read_at=read_at, updated_at=read_at)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0

    async def count_messages(self, conversation_ids: Sequence[UUID]) -> int:
        if not conversation_ids:
            return 0
        stmt = select(func.count(Message.id)).filter(
            Message.conversation_id.in_(conversation_ids)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def count_unread_messages(
        self, conversation_ids: Sequence[UUID], reader_id: UUID
    ) -> int:
        """Counts unread messages in the given conversations not sent by ``reader_id``."""
        if not conversation_ids:
            return 0
        stmt = select(func.count(Message.id)).filter(
            Message.conversation_id.in_(conversation_ids),
            Message.sender_id != reader_id,
            Message.is_read.is_(False),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def update_message(self, message: Message, **values) -> None:
        for field, value in values.items():
            setattr(message, field, value)
        message.updated_at = utcnow()
        self.session.add(message)
        await self.session.flush()

    async def delete_message(self, message: Message) -> None:
        await self.session.delete(message)
        await self.session.flush()
