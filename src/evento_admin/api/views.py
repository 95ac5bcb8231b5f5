"""Protected dashboard views."""

from fastapi import APIRouter, Depends, Request

from evento_admin.api.auth import serialize_profile
from evento_admin.api.guards import protected
from evento_admin.containers import AppContainer
from evento_admin.domain.models import Role, UserProfile

router = APIRouter(prefix="/app", tags=["views"])


def _view(name: str, user: UserProfile) -> dict[str, object]:
    return {"view": name, "user": serialize_profile(user)}


@router.get("")
@router.get("/dashboard")
async def dashboard(user: UserProfile = Depends(protected())) -> dict[str, object]:
    """Dashboard landing view."""
    return _view("dashboard", user)


@router.get("/events")
async def events(user: UserProfile = Depends(protected())) -> dict[str, object]:
    """Event listing view."""
    return _view("events", user)


@router.get("/events/create")
async def create_event(
    user: UserProfile = Depends(protected(Role.ADMIN, Role.ORGANIZADOR)),
) -> dict[str, object]:
    """Event creation view, restricted to admins and organizers."""
    return _view("event-creation", user)


@router.get("/users")
async def users(
    request: Request, user: UserProfile = Depends(protected(Role.ADMIN))
) -> dict[str, object]:
    """User management view listing stored profiles."""
    container: AppContainer = request.app.state.container
    profiles = await container.profile_service.list_profiles()
    view = _view("users", user)
    view["users"] = [serialize_profile(profile) for profile in profiles]
    return view


@router.get("/settings")
async def settings(user: UserProfile = Depends(protected())) -> dict[str, object]:
    """Account settings view."""
    return _view("settings", user)
