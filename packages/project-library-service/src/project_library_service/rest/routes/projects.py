"""Project endpoints, including posts published under a project."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query, Response

from project_library_service.auth.deps import SessionContextDep
from project_library_service.db.models import ProjectModel
from project_library_service.domain.identity import describe_owner
from project_library_service.rest.routes.posts import post_to_schema
from project_library_service.rest.schemas import (
    ParentPostCreateRequest,
    PostListResponse,
    PostSchema,
    ProjectCreateRequest,
    ProjectListResponse,
    ProjectSchema,
    ProjectUpdateRequest,
    identity_to_schema,
)
from project_library_service.services.deps import ContentServiceDep

router = APIRouter(prefix="/projects")


def _project_to_schema(project: ProjectModel) -> ProjectSchema:
    return ProjectSchema(
        id=str(project.id),
        owner_id=str(project.owner_id),
        owner=identity_to_schema(describe_owner(project.owner)) if project.owner else None,
        title=project.title,
        description=project.description or "",
        tags=project.tags or [],
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


@router.post("", response_model=ProjectSchema, status_code=201)
async def create_project(
    request: ProjectCreateRequest, ctx: SessionContextDep, content: ContentServiceDep
) -> ProjectSchema:
    project = await content.create_project(ctx, **request.model_dump())
    return _project_to_schema(project)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    content: ContentServiceDep,
    owner_id: UUID | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ProjectListResponse:
    projects, total = await content.list_projects(owner_id=owner_id, limit=limit, offset=offset)
    return ProjectListResponse(projects=[_project_to_schema(p) for p in projects], total=total)


@router.get("/{project_id}", response_model=ProjectSchema)
async def get_project(project_id: UUID, content: ContentServiceDep) -> ProjectSchema:
    return _project_to_schema(await content.get_project(project_id))


@router.patch("/{project_id}", response_model=ProjectSchema)
async def update_project(
    project_id: UUID,
    request: ProjectUpdateRequest,
    ctx: SessionContextDep,
    content: ContentServiceDep,
) -> ProjectSchema:
    project = await content.update_project(
        ctx, project_id, **request.model_dump(exclude_unset=True)
    )
    return _project_to_schema(project)


@router.delete("/{project_id}", status_code=204)
async def delete_project(
    project_id: UUID, ctx: SessionContextDep, content: ContentServiceDep
) -> Response:
    await content.delete_project(ctx, project_id)
    return Response(status_code=204)


@router.get("/{project_id}/posts", response_model=PostListResponse)
async def list_project_posts(
    project_id: UUID,
    content: ContentServiceDep,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> PostListResponse:
    await content.get_project(project_id)
    posts = await content.list_posts(project_id=project_id, limit=limit, offset=offset)
    return PostListResponse(posts=[post_to_schema(p) for p in posts])


@router.post("/{project_id}/posts", response_model=PostSchema, status_code=201)
async def create_project_post(
    project_id: UUID,
    request: ParentPostCreateRequest,
    ctx: SessionContextDep,
    content: ContentServiceDep,
) -> PostSchema:
    post = await content.create_post(
        ctx,
        content=request.content,
        title=request.title,
        project_id=project_id,
        tags=request.tags,
    )
    return post_to_schema(post)
