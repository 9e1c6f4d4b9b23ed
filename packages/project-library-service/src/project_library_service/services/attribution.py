"""Ownership attribution checks for owned content.

Content belongs to exactly one owner. Only that owner, as the request's active
owner, may change it; holding a role in the owning organization grants nothing
by itself.
"""

from __future__ import annotations

from uuid import UUID

from project_library_service.domain.identity import SessionContext
from project_library_service.errors import Forbidden


def is_mutation_allowed(ctx: SessionContext, content_owner_id: UUID) -> bool:
    return ctx.active_owner_id == content_owner_id


def authorize_mutation(ctx: SessionContext, content_owner_id: UUID) -> None:
    if not is_mutation_allowed(ctx, content_owner_id):
        raise Forbidden("Only the owning identity can modify this content")


def authorize_parent(ctx: SessionContext, parent_owner_id: UUID) -> None:
    """A post may only be attached to a project or event the active owner owns."""
    if ctx.active_owner_id != parent_owner_id:
        raise Forbidden("You can only post under content owned by your active identity")
