"""Post endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response

from project_library_service.auth.deps import SessionContextDep
from project_library_service.db.models import PostModel
from project_library_service.domain.identity import describe_owner
from project_library_service.rest.schemas import (
    PostCreateRequest,
    PostListResponse,
    PostSchema,
    PostUpdateRequest,
    identity_to_schema,
)
from project_library_service.services.deps import ContentServiceDep

router = APIRouter(prefix="/posts")


def post_to_schema(post: PostModel) -> PostSchema:
    """Convert an ORM PostModel to the REST PostSchema."""
    return PostSchema(
        id=str(post.id),
        owner_id=str(post.owner_id),
        owner=identity_to_schema(describe_owner(post.owner)) if post.owner else None,
        project_id=str(post.project_id) if post.project_id else None,
        event_id=str(post.event_id) if post.event_id else None,
        title=post.title,
        content=post.content,
        tags=post.tags or [],
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


@router.post("", response_model=PostSchema, status_code=201)
async def create_post(
    request: PostCreateRequest, ctx: SessionContextDep, content: ContentServiceDep
) -> PostSchema:
    post = await content.create_post(
        ctx,
        content=request.content,
        title=request.title,
        project_id=request.project_id,
        event_id=request.event_id,
        tags=request.tags,
    )
    return post_to_schema(post)


@router.get("", response_model=PostListResponse)
async def list_posts(
    content: ContentServiceDep,
    owner_id: UUID | None = None,
    project_id: UUID | None = None,
    event_id: UUID | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PostListResponse:
    posts = await content.list_posts(
        owner_id=owner_id, project_id=project_id, event_id=event_id, limit=limit, offset=offset
    )
    return PostListResponse(posts=[post_to_schema(p) for p in posts])


@router.get("/{post_id}", response_model=PostSchema)
async def get_post(post_id: UUID, content: ContentServiceDep) -> PostSchema:
    return post_to_schema(await content.get_post(post_id))


@router.patch("/{post_id}", response_model=PostSchema)
async def update_post(
    post_id: UUID,
    request: PostUpdateRequest,
    ctx: SessionContextDep,
    content: ContentServiceDep,
) -> PostSchema:
    post = await content.update_post(ctx, post_id, **request.model_dump(exclude_unset=True))
    return post_to_schema(post)


@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: UUID, ctx: SessionContextDep, content: ContentServiceDep) -> Response:
    await content.delete_post(ctx, post_id)
    return Response(status_code=204)
