"""Direct message endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from project_library_service.auth.deps import SessionContextDep
from project_library_service.db.models import MessageModel
from project_library_service.domain.enums import OwnerKind
from project_library_service.domain.identity import describe_owner
from project_library_service.rest.schemas import (
    ConversationResponse,
    InboxEntrySchema,
    InboxResponse,
    MessageSchema,
    SendMessageRequest,
    identity_to_schema,
)
from project_library_service.services.deps import MessageServiceDep

router = APIRouter(prefix="/messages")


def _message_to_schema(message: MessageModel) -> MessageSchema:
    return MessageSchema(
        id=str(message.id),
        sender_owner_id=str(message.sender_owner_id),
        receiver_owner_id=str(message.receiver_owner_id),
        content=message.content,
        created_at=message.created_at,
        read_at=message.read_at,
    )


@router.post("", response_model=MessageSchema, status_code=201)
async def send_message(
    request: SendMessageRequest, ctx: SessionContextDep, messages: MessageServiceDep
) -> MessageSchema:
    message = await messages.send(ctx, request.receiver_owner_id, request.content)
    return _message_to_schema(message)


@router.get("/inbox", response_model=InboxResponse)
async def inbox(ctx: SessionContextDep, messages: MessageServiceDep) -> InboxResponse:
    entries = await messages.inbox(ctx)
    return InboxResponse(
        conversations=[
            InboxEntrySchema(
                owner_id=str(entry.counterpart.id),
                kind=OwnerKind(entry.counterpart.kind),
                identity=identity_to_schema(describe_owner(entry.counterpart)),
                last_message=_message_to_schema(entry.last_message),
                unread=entry.unread,
            )
            for entry in entries
        ]
    )


@router.get("/conversation/{owner_id}", response_model=ConversationResponse)
async def conversation(
    owner_id: UUID, ctx: SessionContextDep, messages: MessageServiceDep
) -> ConversationResponse:
    thread = await messages.conversation(ctx, owner_id)
    return ConversationResponse(messages=[_message_to_schema(m) for m in thread])


@router.patch("/{message_id}/read", response_model=MessageSchema)
async def mark_read(
    message_id: UUID, ctx: SessionContextDep, messages: MessageServiceDep
) -> MessageSchema:
    return _message_to_schema(await messages.mark_read(ctx, message_id))
