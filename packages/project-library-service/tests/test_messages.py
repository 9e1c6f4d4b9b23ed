"""Direct messages between owners."""

from __future__ import annotations

import uuid

import pytest
from _helpers import context_for, make_person

from project_library_service.errors import BadRequest, Forbidden, NotFound
from project_library_service.services.messages import MessageService
from project_library_service.services.organizations import OrganizationService


@pytest.mark.asyncio
async def test_send_and_read_conversation(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    ada_ctx = await context_for(session, ada.person.id)
    bob_ctx = await context_for(session, bob.person.id)
    messages = MessageService(session)

    first = await messages.send(ada_ctx, bob_ctx.active_owner_id, "Hi Bob")
    await messages.send(bob_ctx, ada_ctx.active_owner_id, "Hi Ada")
    assert first.sender_owner_id == ada_ctx.active_owner_id

    thread = await messages.conversation(ada_ctx, bob_ctx.active_owner_id)
    assert [m.content for m in thread] == ["Hi Bob", "Hi Ada"]


@pytest.mark.asyncio
async def test_send_rules(session):
    ada = await make_person(session, "ada")
    ctx = await context_for(session, ada.person.id)
    messages = MessageService(session)

    with pytest.raises(BadRequest):
        await messages.send(ctx, ctx.active_owner_id, "talking to myself")
    with pytest.raises(NotFound):
        await messages.send(ctx, uuid.uuid4(), "anyone there?")


@pytest.mark.asyncio
async def test_organization_messages_are_separate_from_personal(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    created = await OrganizationService(session).create_organization(
        ada.person.id, name="Acme", slug="acme"
    )
    acme_ctx = await context_for(session, ada.person.id, created.owner_id)
    ada_ctx = await context_for(session, ada.person.id)
    bob_ctx = await context_for(session, bob.person.id)
    messages = MessageService(session)

    await messages.send(bob_ctx, created.owner_id, "Hello Acme")

    assert [e.counterpart.id for e in await messages.inbox(acme_ctx)] == [bob_ctx.active_owner_id]
    assert await messages.inbox(ada_ctx) == []


@pytest.mark.asyncio
async def test_inbox_keeps_latest_message_per_counterpart(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    cy = await make_person(session, "cyd")
    ada_ctx = await context_for(session, ada.person.id)
    bob_ctx = await context_for(session, bob.person.id)
    cy_ctx = await context_for(session, cy.person.id)
    messages = MessageService(session)

    await messages.send(bob_ctx, ada_ctx.active_owner_id, "one")
    await messages.send(bob_ctx, ada_ctx.active_owner_id, "two")
    await messages.send(cy_ctx, ada_ctx.active_owner_id, "three")
    await messages.send(ada_ctx, bob_ctx.active_owner_id, "four")

    inbox = await messages.inbox(ada_ctx)
    assert [(e.counterpart.id, e.last_message.content, e.unread) for e in inbox] == [
        (bob_ctx.active_owner_id, "four", 2),
        (cy_ctx.active_owner_id, "three", 1),
    ]


@pytest.mark.asyncio
async def test_only_recipient_marks_read(session):
    ada = await make_person(session, "ada")
    bob = await make_person(session, "bob")
    ada_ctx = await context_for(session, ada.person.id)
    bob_ctx = await context_for(session, bob.person.id)
    messages = MessageService(session)
    message_id = (await messages.send(ada_ctx, bob_ctx.active_owner_id, "ping")).id

    with pytest.raises(Forbidden):
        await messages.mark_read(ada_ctx, message_id)

    read = await messages.mark_read(bob_ctx, message_id)
    first_read_at = read.read_at
    assert first_read_at is not None
    again = await messages.mark_read(bob_ctx, message_id)
    assert again.read_at == first_read_at
