"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from evento_admin.api.auth import router as auth_router
from evento_admin.api.guards import GuardRedirect, guard_redirect_handler
from evento_admin.api.views import router as views_router
from evento_admin.app_logging import configure_logging
from evento_admin.containers import AppContainer, build_container
from evento_admin.domain.errors import ProfileResolutionError


def create_app(
    container: AppContainer | None = None,
    container_factory: Callable[[], Awaitable[AppContainer]] = build_container,
) -> FastAPI:
    """Create a FastAPI app configured with dependencies.

    Without a container one is built by container_factory during startup.
    """
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.container is None:
            app.state.container = await container_factory()
        state_container: AppContainer = app.state.container
        configure_logging(state_container.settings.log_level)
        await state_container.session_coordinator.start()
        logger.info("Session coordinator started")
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.add_exception_handler(GuardRedirect, guard_redirect_handler)

    @app.exception_handler(ProfileResolutionError)
    async def profile_error_handler(
        _: Request, exc: ProfileResolutionError
    ) -> JSONResponse:
        logger.error("Profile store unavailable: %s", exc.__cause__ or exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message, "code": "profile-unavailable"},
        )

    app.include_router(auth_router)
    app.include_router(views_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def home() -> dict[str, str]:
        """Public landing view."""
        return {"view": "home"}

    @app.get("/login")
    async def login_view() -> dict[str, str]:
        """Public login view."""
        return {"view": "login"}

    @app.get("/unauthorized")
    async def unauthorized_view() -> dict[str, str]:
        """Shown when the user's role does not allow the requested view."""
        return {"view": "unauthorized"}

    return app
