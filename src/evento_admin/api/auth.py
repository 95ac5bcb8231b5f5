"""Authentication endpoints backed by the session coordinator."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from evento_admin.api.auth_models import LoginRequest  # noqa: TC001
from evento_admin.api.guards import caller_session
from evento_admin.domain.errors import (
    AuthErrorKind,
    AuthProviderError,
    InvalidCredentialsFormat,
    LogoutError,
    ProfileResolutionError,
)

if TYPE_CHECKING:
    from evento_admin.containers import AppContainer
    from evento_admin.domain.models import SessionState, UserProfile

router = APIRouter(prefix="/auth", tags=["auth"])

_PROVIDER_ERROR_STATUS: dict[AuthErrorKind, int] = {
    AuthErrorKind.INVALID_EMAIL: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.USER_DISABLED: status.HTTP_403_FORBIDDEN,
    AuthErrorKind.USER_NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.WRONG_PASSWORD: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    AuthErrorKind.NETWORK_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
    AuthErrorKind.INTERNAL_ERROR: status.HTTP_502_BAD_GATEWAY,
    AuthErrorKind.UNKNOWN: status.HTTP_400_BAD_REQUEST,
}


@router.get("/session")
async def current_session(request: Request) -> dict[str, object]:
    """Return the session as seen by the caller."""
    return serialize_session(caller_session(request))


@router.post("/login", response_model=None)
async def login(
    payload: LoginRequest, request: Request, response: Response
) -> dict[str, object] | JSONResponse:
    """Sign in with email and password and hand the caller a session cookie."""
    container: AppContainer = request.app.state.container
    coordinator = container.session_coordinator
    try:
        profile = await coordinator.login(payload.email, payload.password)
    except AuthProviderError as exc:
        return _error_response(_PROVIDER_ERROR_STATUS[exc.kind], exc.message, exc.kind)
    except InvalidCredentialsFormat as exc:
        return _error_response(
            status.HTTP_422_UNPROCESSABLE_ENTITY, exc.message, "invalid-format"
        )
    except ProfileResolutionError as exc:
        return _error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE, exc.message, "profile-unavailable"
        )
    state = coordinator.state
    if state.user is None or state.user.id != profile.id:
        # A newer session event superseded this login.
        return serialize_session(caller_session(request))
    token = container.session_binding.issue(state)
    settings = container.settings
    response.set_cookie(
        settings.session_cookie_name,
        token or "",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return serialize_session(state)


@router.post("/logout", response_model=None)
async def logout(
    request: Request, response: Response
) -> dict[str, object] | JSONResponse:
    """Sign out the caller's session."""
    container: AppContainer = request.app.state.container
    coordinator = container.session_coordinator
    binding = container.session_binding
    cookie_name = container.settings.session_cookie_name
    if not binding.owns(request.cookies.get(cookie_name), coordinator.state):
        response.delete_cookie(cookie_name)
        return serialize_session(caller_session(request))
    try:
        await coordinator.logout()
    except LogoutError as exc:
        return _error_response(status.HTTP_502_BAD_GATEWAY, exc.message, "logout-failed")
    binding.release()
    response.delete_cookie(cookie_name)
    return serialize_session(coordinator.state)


def serialize_session(state: SessionState) -> dict[str, object]:
    """Render a session state as JSON-friendly data."""
    return {
        "user": serialize_profile(state.user) if state.user else None,
        "is_authenticated": state.is_authenticated,
        "is_loading": state.is_loading,
    }


def serialize_profile(profile: UserProfile) -> dict[str, object]:
    """Render a user profile as JSON-friendly data."""
    return {
        "id": profile.id,
        "email": profile.email,
        "name": profile.name,
        "role": profile.role.value,
        "phone": profile.phone,
        "location": profile.location,
        "status": profile.status.value,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
    }


def _error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"detail": message, "code": code}
    )
