"""Liveness and readiness probes."""

from fastapi import APIRouter
from sqlalchemy import text

from project_library_service.db.deps import SessionDep

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(session: SessionDep) -> dict[str, str]:
    """Ready once the database answers; failures surface as a 500 via the error handlers."""
    await session.execute(text("SELECT 1"))
    return {"status": "ready", "database": "ok"}
