"""FastAPI dependency injection for services."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from project_library_service.db.deps import SessionDep
from project_library_service.media import MediaStore, get_media_store
from project_library_service.services.actor_switch import ActorSwitcher
from project_library_service.services.content import ContentService
from project_library_service.services.follows import FollowGraph
from project_library_service.services.identity import IdentityService
from project_library_service.services.memberships import MembershipAuthority
from project_library_service.services.messages import MessageService
from project_library_service.services.organizations import OrganizationService


def get_identity_service(session: SessionDep) -> IdentityService:
    return IdentityService(session)


def get_membership_authority(session: SessionDep) -> MembershipAuthority:
    return MembershipAuthority(session)


def get_organization_service(session: SessionDep) -> OrganizationService:
    return OrganizationService(session)


def get_follow_graph(session: SessionDep) -> FollowGraph:
    return FollowGraph(session)


def get_actor_switcher(session: SessionDep) -> ActorSwitcher:
    return ActorSwitcher(session)


def get_content_service(
    session: SessionDep, media: Annotated[MediaStore, Depends(get_media_store)]
) -> ContentService:
    return ContentService(session, media)


def get_message_service(session: SessionDep) -> MessageService:
    return MessageService(session)


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
MembershipAuthorityDep = Annotated[MembershipAuthority, Depends(get_membership_authority)]
OrganizationServiceDep = Annotated[OrganizationService, Depends(get_organization_service)]
FollowGraphDep = Annotated[FollowGraph, Depends(get_follow_graph)]
ActorSwitcherDep = Annotated[ActorSwitcher, Depends(get_actor_switcher)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
MessageServiceDep = Annotated[MessageService, Depends(get_message_service)]
