"""Direct messages between owners."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from project_library_service.db.engine import unit_of_work
from project_library_service.db.models import MessageModel, OwnerModel
from project_library_service.db.repositories.identity import OwnersRepo
from project_library_service.db.repositories.messages import MessagesRepo
from project_library_service.domain.identity import SessionContext, describe_owner
from project_library_service.errors import BadRequest, Forbidden, NotFound

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InboxEntry:
    """The latest message exchanged with one counterpart."""

    counterpart: OwnerModel
    last_message: MessageModel
    unread: int


class MessageService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._owners = OwnersRepo(session)
        self._messages = MessagesRepo(session)

    async def send(self, ctx: SessionContext, receiver_owner_id: UUID, content: str) -> MessageModel:
        if receiver_owner_id == ctx.active_owner_id:
            raise BadRequest("You cannot message yourself")
        if not content or not content.strip():
            raise BadRequest("Message content is required")
        receiver = await self._owners.get(receiver_owner_id)
        if receiver is None or describe_owner(receiver) is None:
            raise NotFound("Recipient not found")

        async with unit_of_work(self._session):
            message = await self._messages.create(ctx.active_owner, receiver, content)

        log.info(
            "message_sent",
            message_id=str(message.id),
            sender_owner_id=str(ctx.active_owner_id),
            receiver_owner_id=str(receiver_owner_id),
        )
        return message

    async def conversation(self, ctx: SessionContext, other_owner_id: UUID) -> list[MessageModel]:
        other = await self._owners.get(other_owner_id)
        if other is None:
            raise NotFound("Owner not found")
        return await self._messages.between(ctx.active_owner_id, other_owner_id)

    async def inbox(self, ctx: SessionContext) -> list[InboxEntry]:
        """One entry per counterpart, most recent conversation first."""
        latest: dict[UUID, MessageModel] = {}
        unread: dict[UUID, int] = {}
        for message in await self._messages.involving(ctx.active_owner_id):
            incoming = message.receiver_owner_id == ctx.active_owner_id
            other_id = message.sender_owner_id if incoming else message.receiver_owner_id
            latest.setdefault(other_id, message)
            if incoming and message.read_at is None:
                unread[other_id] = unread.get(other_id, 0) + 1

        entries = []
        for other_id, message in latest.items():
            incoming = message.receiver_owner_id == ctx.active_owner_id
            counterpart = message.sender if incoming else message.receiver
            entries.append(
                InboxEntry(counterpart=counterpart, last_message=message, unread=unread.get(other_id, 0))
            )
        return entries

    async def mark_read(self, ctx: SessionContext, message_id: UUID) -> MessageModel:
        async with unit_of_work(self._session):
            message = await self._messages.get(message_id)
            if message is None:
                raise NotFound("Message not found")
            if message.receiver_owner_id != ctx.active_owner_id:
                raise Forbidden("Only the recipient can mark a message as read")
            await self._messages.mark_read(message)
        return message
