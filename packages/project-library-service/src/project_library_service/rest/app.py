"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from project_library_service import __version__
from project_library_service.db.engine import close_db, init_db
from project_library_service.rest.errors import register_error_handlers
from project_library_service.rest.routes.auth import router as auth_router
from project_library_service.rest.routes.events import router as events_router
from project_library_service.rest.routes.health import router as health_router
from project_library_service.rest.routes.messages import router as messages_router
from project_library_service.rest.routes.organizations import router as organizations_router
from project_library_service.rest.routes.owners import router as owners_router
from project_library_service.rest.routes.people import router as people_router
from project_library_service.rest.routes.posts import router as posts_router
from project_library_service.rest.routes.projects import router as projects_router
from project_library_service.rest.routes.session import router as session_router
from project_library_service.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_db()
    yield
    await close_db()


def include_routers(app: FastAPI) -> None:
    # Public routes
    app.include_router(health_router, tags=["health"])

    # register/login/refresh are public; everything else resolves the caller's session
    app.include_router(auth_router, prefix="/api/v1", tags=["auth"])
    app.include_router(session_router, prefix="/api/v1", tags=["session"])
    app.include_router(organizations_router, prefix="/api/v1", tags=["organizations"])
    app.include_router(people_router, prefix="/api/v1", tags=["people"])
    app.include_router(owners_router, prefix="/api/v1", tags=["owners"])
    app.include_router(projects_router, prefix="/api/v1", tags=["projects"])
    app.include_router(events_router, prefix="/api/v1", tags=["events"])
    app.include_router(posts_router, prefix="/api/v1", tags=["posts"])
    app.include_router(messages_router, prefix="/api/v1", tags=["messages"])


def create_app() -> FastAPI:
    app = FastAPI(
        title="Project Library API",
        description="People, organizations and the content they publish",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    include_routers(app)
    return app
