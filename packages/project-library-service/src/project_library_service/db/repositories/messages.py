"""Repository for owner-to-owner messages."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.models import MessageModel, OwnerModel


class MessagesRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, sender: OwnerModel, receiver: OwnerModel, content: str) -> MessageModel:
        message = MessageModel(sender=sender, receiver=receiver, content=content)
        self._session.add(message)
        await self._session.flush()
        return message

    async def get(self, message_id: UUID) -> MessageModel | None:
        return await self._session.get(MessageModel, message_id)

    async def between(self, owner_id: UUID, other_owner_id: UUID) -> list[MessageModel]:
        """All messages exchanged by two owners, oldest first."""
        result = await self._session.execute(
            select(MessageModel)
            .where(
                or_(
                    and_(
                        MessageModel.sender_owner_id == owner_id,
                        MessageModel.receiver_owner_id == other_owner_id,
                    ),
                    and_(
                        MessageModel.sender_owner_id == other_owner_id,
                        MessageModel.receiver_owner_id == owner_id,
                    ),
                )
            )
            .order_by(MessageModel.created_at.asc())
        )
        return list(result.scalars().all())

    async def involving(self, owner_id: UUID) -> list[MessageModel]:
        """Every message sent or received by an owner, newest first."""
        result = await self._session.execute(
            select(MessageModel)
            .where(
                or_(
                    MessageModel.sender_owner_id == owner_id,
                    MessageModel.receiver_owner_id == owner_id,
                )
            )
            .order_by(MessageModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def mark_read(self, message: MessageModel) -> MessageModel:
        if message.read_at is None:
            message.read_at = datetime.now(UTC)
            await self._session.flush()
        return message
