"""Auth domain models."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass
class Principal:
    """The authenticated caller as stated by a verified access token."""

    person_id: UUID
    email: str
    # the "act" claim; re-validated on every request, never trusted as-is
    active_owner_id: UUID | None = None
