"""Pydantic request/response models for REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from project_library_service.domain.enums import OwnerKind, Role, SwitchState
from project_library_service.domain.identity import OwnerIdentity, PersonIdentity

# ---------------------------------------------------------------------------
# Owner identities
# ---------------------------------------------------------------------------


class PersonIdentitySchema(BaseModel):
    kind: Literal["PERSON"] = "PERSON"
    id: str
    handle: str
    display_name: str | None = None


class OrganizationIdentitySchema(BaseModel):
    kind: Literal["ORGANIZATION"] = "ORGANIZATION"
    id: str
    slug: str
    name: str


OwnerIdentitySchema = Annotated[
    PersonIdentitySchema | OrganizationIdentitySchema, Field(discriminator="kind")
]


def identity_to_schema(
    identity: OwnerIdentity | None,
) -> PersonIdentitySchema | OrganizationIdentitySchema | None:
    if identity is None:
        return None
    if isinstance(identity, PersonIdentity):
        return PersonIdentitySchema(
            id=str(identity.id), handle=identity.handle, display_name=identity.display_name
        )
    return OrganizationIdentitySchema(id=str(identity.id), slug=identity.slug, name=identity.name)


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=8)
    handle: str = Field(min_length=3, max_length=20, pattern=r"^[A-Za-z0-9_-]+$")
    display_name: str | None = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    active_owner_id: str | None = None


class MeResponse(BaseModel):
    person_id: str
    email: str
    handle: str
    display_name: str | None = None
    active_owner_id: str
    active_owner: OwnerIdentitySchema


class UpdateProfileRequest(BaseModel):
    display_name: str | None = Field(default=None, max_length=100)
    headline: str | None = Field(default=None, max_length=200)
    bio: str | None = Field(default=None, max_length=2000)
    location: str | None = Field(default=None, max_length=100)


class PersonProfileSchema(BaseModel):
    id: str
    handle: str
    display_name: str | None = None
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    # the personal owner; follow and message this person through it
    owner_id: str | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Session / actor switching
# ---------------------------------------------------------------------------


class ActiveOwnerResponse(BaseModel):
    kind: OwnerKind
    owner_id: str
    data: OwnerIdentitySchema
    state: SwitchState


class SwitchRequest(BaseModel):
    # null switches back to the personal owner
    owner_id: UUID | None = None


class PendingSwitchResponse(BaseModel):
    owner_id: str
    kind: OwnerKind
    state: SwitchState
    switch_token: str


class CommitSwitchRequest(BaseModel):
    switch_token: str


# ---------------------------------------------------------------------------
# Organizations & memberships
# ---------------------------------------------------------------------------


class CreateOrganizationRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=100)
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    interests: list[str] = Field(default_factory=list)
    is_public: bool = True


class UpdateOrganizationRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    interests: list[str] | None = None
    is_public: bool | None = None


class OrganizationSchema(BaseModel):
    id: str
    name: str
    slug: str
    headline: str | None = None
    bio: str | None = None
    location: str | None = None
    interests: list[str] = Field(default_factory=list)
    is_public: bool = True
    primary_owner_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CreateOrganizationResponse(BaseModel):
    organization: OrganizationSchema
    owner_id: str


class MyOrganizationSchema(BaseModel):
    organization: OrganizationSchema
    owner_id: str
    role: Role


class MyOrganizationsResponse(BaseModel):
    organizations: list[MyOrganizationSchema]


class AddMemberRequest(BaseModel):
    person_id: UUID
    role: Role = Role.MEMBER


class ChangeRoleRequest(BaseModel):
    role: Role


class MemberSchema(BaseModel):
    owner_id: str
    role: Role
    person: PersonIdentitySchema | None = None
    joined_at: datetime | None = None


class MemberListResponse(BaseModel):
    members: list[MemberSchema]


# ---------------------------------------------------------------------------
# Owners & follows
# ---------------------------------------------------------------------------


class OwnerSchema(BaseModel):
    owner_id: str
    kind: OwnerKind
    status: str
    identity: OwnerIdentitySchema | None = None
    followers: int = 0
    following: int = 0


class FollowEdgeSchema(BaseModel):
    owner_id: str
    kind: OwnerKind
    followed_at: datetime | None = None
    identity: OwnerIdentitySchema | None = None
    anomaly: bool = False


class FollowListResponse(BaseModel):
    owners: list[FollowEdgeSchema]
    total: int


class FollowStatusResponse(BaseModel):
    following: bool


# ---------------------------------------------------------------------------
# Owned content
# ---------------------------------------------------------------------------


class ProjectCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=10000)
    tags: list[str] = Field(default_factory=list)


class ProjectUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=10000)
    tags: list[str] | None = None


class ProjectSchema(BaseModel):
    id: str
    owner_id: str
    owner: OwnerIdentitySchema | None = None
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProjectListResponse(BaseModel):
    projects: list[ProjectSchema]
    total: int


class EventCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=10000)
    location: str | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)


class EventUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=10000)
    location: str | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    tags: list[str] | None = None


class EventSchema(BaseModel):
    id: str
    owner_id: str
    owner: OwnerIdentitySchema | None = None
    title: str
    description: str = ""
    location: str | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EventListResponse(BaseModel):
    events: list[EventSchema]
    total: int


class PostCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=10000)
    title: str | None = Field(default=None, max_length=200)
    project_id: UUID | None = None
    event_id: UUID | None = None
    tags: list[str] = Field(default_factory=list)


class ParentPostCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=10000)
    title: str | None = Field(default=None, max_length=200)
    tags: list[str] = Field(default_factory=list)


class PostUpdateRequest(BaseModel):
    content: str | None = Field(default=None, min_length=1, max_length=10000)
    title: str | None = Field(default=None, max_length=200)
    tags: list[str] | None = None


class PostSchema(BaseModel):
    id: str
    owner_id: str
    owner: OwnerIdentitySchema | None = None
    project_id: str | None = None
    event_id: str | None = None
    title: str | None = None
    content: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PostListResponse(BaseModel):
    posts: list[PostSchema]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class SendMessageRequest(BaseModel):
    receiver_owner_id: UUID
    content: str = Field(min_length=1, max_length=5000)


class MessageSchema(BaseModel):
    id: str
    sender_owner_id: str
    receiver_owner_id: str
    content: str
    created_at: datetime | None = None
    read_at: datetime | None = None


class ConversationResponse(BaseModel):
    messages: list[MessageSchema]


class InboxEntrySchema(BaseModel):
    owner_id: str
    kind: OwnerKind
    identity: OwnerIdentitySchema | None = None
    last_message: MessageSchema
    unread: int = 0


class InboxResponse(BaseModel):
    conversations: list[InboxEntrySchema]
