"""Media storage boundary.

Uploaded images live outside the database, keyed by owner, content kind and
content id. The service only ever asks the store to release everything
attached to a deleted project or event.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import Protocol
from uuid import UUID

import structlog

from project_library_service.settings import settings

log = structlog.get_logger(__name__)


class MediaStore(Protocol):
    async def release(self, owner_id: UUID, kind: str, content_id: UUID) -> None: ...


class LocalMediaStore:
    """Media kept on local disk under ``<root>/<owner_id>/<kind>/<content_id>``."""

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root or settings.media_root)

    def path_for(self, owner_id: UUID, kind: str, content_id: UUID) -> Path:
        return self.root / str(owner_id) / kind / str(content_id)

    async def release(self, owner_id: UUID, kind: str, content_id: UUID) -> None:
        path = self.path_for(owner_id, kind, content_id)
        if not path.exists():
            return
        await asyncio.to_thread(shutil.rmtree, path)
        log.info("media_released", owner_id=str(owner_id), kind=kind, content_id=str(content_id))


_store: MediaStore | None = None


def get_media_store() -> MediaStore:
    global _store
    if _store is None:
        _store = LocalMediaStore()
    return _store
