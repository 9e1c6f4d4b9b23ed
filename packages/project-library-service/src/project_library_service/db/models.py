"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


# ---------------------------------------------------------------------------
# Identity models
# ---------------------------------------------------------------------------


class PersonModel(Base):
    __tablename__ = "people"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)
    handle = Column(String(20), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    display_name = Column(Text, nullable=True)
    headline = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class OrganizationModel(Base):
    __tablename__ = "organizations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    slug = Column(Text, unique=True, nullable=False)
    headline = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(Text, nullable=True)
    interests = Column(JSON, nullable=False, default=list)
    is_public = Column(Boolean, nullable=False, default=True)
    # owners.organization_id points back here, so this side is added after both tables exist
    primary_owner_id = Column(
        Uuid,
        ForeignKey("owners.id", use_alter=True, name="fk_organizations_primary_owner_id"),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class OwnerModel(Base):
    __tablename__ = "owners"
    __table_args__ = (
        UniqueConstraint("person_id", "organization_id", name="uq_owners_person_organization"),
        UniqueConstraint("id", "organization_id", name="uq_owners_id_organization"),
        # NULLs are distinct in the constraint above, so the personal owner needs its own index
        Index(
            "uq_owners_personal",
            "person_id",
            unique=True,
            postgresql_where=text("organization_id IS NULL"),
            sqlite_where=text("organization_id IS NULL"),
        ),
        CheckConstraint(
            "(kind = 'PERSON' AND organization_id IS NULL)"
            " OR (kind = 'ORGANIZATION' AND organization_id IS NOT NULL)",
            name="ck_owners_kind_matches_scope",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    person_id = Column(Uuid, ForeignKey("people.id"), nullable=False, index=True)
    organization_id = Column(Uuid, ForeignKey("organizations.id"), nullable=True)
    kind = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False, default="ACTIVE")
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    person = relationship("PersonModel", lazy="joined")
    organization = relationship(
        "OrganizationModel", foreign_keys=[organization_id], lazy="joined"
    )


class MembershipModel(Base):
    __tablename__ = "memberships"
    __table_args__ = (
        # a membership's organization must be its owner's organization
        ForeignKeyConstraint(
            ["owner_id", "organization_id"],
            ["owners.id", "owners.organization_id"],
            name="fk_memberships_owner_scope",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, unique=True, nullable=False)
    organization_id = Column(
        Uuid, ForeignKey("organizations.id"), nullable=False, index=True
    )
    role = Column(String(16), nullable=False, default="MEMBER")
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner = relationship(
        "OwnerModel",
        primaryjoin="MembershipModel.owner_id == OwnerModel.id",
        foreign_keys=[owner_id],
        lazy="joined",
    )


class FollowModel(Base):
    __tablename__ = "follows"
    __table_args__ = (
        UniqueConstraint("follower_owner_id", "following_owner_id", name="uq_follows_pair"),
        CheckConstraint("follower_owner_id <> following_owner_id", name="ck_follows_no_self"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    follower_owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    following_owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    follower = relationship("OwnerModel", foreign_keys=[follower_owner_id], lazy="joined")
    following = relationship("OwnerModel", foreign_keys=[following_owner_id], lazy="joined")


# ---------------------------------------------------------------------------
# Owned content
# ---------------------------------------------------------------------------


class ProjectModel(Base):
    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner = relationship("OwnerModel", lazy="joined")


class EventModel(Base):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    location = Column(Text, nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    ends_at = Column(DateTime(timezone=True), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner = relationship("OwnerModel", lazy="joined")


class PostModel(Base):
    __tablename__ = "posts"
    __table_args__ = (
        CheckConstraint(
            "project_id IS NULL OR event_id IS NULL", name="ck_posts_single_parent"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    project_id = Column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True, index=True
    )
    event_id = Column(
        Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    owner = relationship("OwnerModel", lazy="joined")


class MessageModel(Base):
    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint(
            "sender_owner_id <> receiver_owner_id", name="ck_messages_no_self"
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sender_owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    receiver_owner_id = Column(Uuid, ForeignKey("owners.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    read_at = Column(DateTime(timezone=True), nullable=True)

    sender = relationship("OwnerModel", foreign_keys=[sender_owner_id], lazy="joined")
    receiver = relationship("OwnerModel", foreign_keys=[receiver_owner_id], lazy="joined")
