"""FastAPI dependencies that gate protected views."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, Request, status
from fastapi.responses import RedirectResponse

from evento_admin.domain.models import Role, SessionState, UserProfile
from evento_admin.services.route_guard import RenderDecision, RouteGuard, parse_roles

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from evento_admin.containers import AppContainer


class GuardRedirect(Exception):  # noqa: N818
    """Raised by a guard to send the client elsewhere."""

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


async def guard_redirect_handler(_: Request, exc: Exception) -> RedirectResponse:
    """Turn a guard redirect into a 303 response."""
    location = exc.location if isinstance(exc, GuardRedirect) else "/"
    return RedirectResponse(location, status_code=status.HTTP_303_SEE_OTHER)


def caller_session(request: Request) -> SessionState:
    """Return the session as seen by the client making the request."""
    container: AppContainer = request.app.state.container
    token = request.cookies.get(container.settings.session_cookie_name)
    return container.session_binding.view(
        token, container.session_coordinator.state
    )


def protected(*roles: Role | str) -> Callable[[Request], Awaitable[UserProfile]]:
    """Build a dependency admitting authenticated users with one of roles.

    With no roles any authenticated user is admitted.
    """
    required_roles = parse_roles(roles) if roles else None

    async def dependency(request: Request) -> UserProfile:
        container: AppContainer = request.app.state.container
        settings = container.settings
        route_guard = RouteGuard(
            required_roles=required_roles,
            login_path=settings.login_path,
            unauthorized_path=settings.unauthorized_path,
        )
        coordinator = container.session_coordinator
        if coordinator.state.is_loading:
            await coordinator.wait_until_loaded(settings.session_bootstrap_timeout)
        state = caller_session(request)
        decision = route_guard.decide(state)
        if decision is RenderDecision.SUSPEND:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Sessão carregando",
                headers={"Retry-After": "1"},
            )
        target = route_guard.redirect_target(decision)
        if target is not None or state.user is None:
            raise GuardRedirect(target or settings.login_path)
        return state.user

    return dependency
