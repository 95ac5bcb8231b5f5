"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from supabase import acreate_client

from evento_admin.adapters.supabase_identity_provider import SupabaseIdentityProvider
from evento_admin.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from evento_admin.config import Settings
from evento_admin.services.profiles import ProfileService
from evento_admin.services.session import SessionCoordinator
from evento_admin.services.session_binding import SessionBinding


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    profile_service: ProfileService
    session_coordinator: SessionCoordinator
    close_resources: Callable[[], Awaitable[None]]
    session_binding: SessionBinding = field(default_factory=SessionBinding)


async def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = await acreate_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    profile_repository = SupabaseProfileRepository(
        supabase_client, table=resolved_settings.users_table
    )
    profile_service = ProfileService(profile_repository)
    session_coordinator = SessionCoordinator(
        identity_provider=SupabaseIdentityProvider(supabase_client),
        profile_service=profile_service,
    )

    async def close_resources() -> None:
        await session_coordinator.stop()

    return AppContainer(
        settings=resolved_settings,
        profile_service=profile_service,
        session_coordinator=session_coordinator,
        close_resources=close_resources,
    )
