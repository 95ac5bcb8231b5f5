"""Supabase-backed user profile repository."""

from dataclasses import dataclass
from datetime import datetime

import httpx
from postgrest import APIError
from supabase import AsyncClient

from evento_admin.domain.errors import ProfileResolutionError
from evento_admin.domain.models import (
    DEFAULT_DISPLAY_NAME,
    AccountStatus,
    Role,
    UserProfile,
)
from evento_admin.services.profiles import ProfileRepository

_COLUMNS = "id, email, name, role, phone, location, status, created_at"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for user profiles."""

    client: AsyncClient
    table: str = "users"

    async def get_profile(self, profile_id: str) -> UserProfile | None:
        """Return the profile row for a principal id, if present."""
        try:
            response = (
                await self.client.table(self.table)
                .select(_COLUMNS)
                .eq("id", profile_id)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise ProfileResolutionError from exc
        if not response.data:
            return None
        return _row_to_profile(response.data[0])

    async def upsert_profile(self, profile: UserProfile) -> None:
        """Insert the profile row, leaving an existing row untouched."""
        try:
            await (
                self.client.table(self.table)
                .upsert(
                    _profile_to_row(profile),
                    on_conflict="id",
                    ignore_duplicates=True,
                )
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise ProfileResolutionError from exc

    async def list_profiles(self) -> list[UserProfile]:
        """Return all profiles, oldest first."""
        try:
            response = (
                await self.client.table(self.table)
                .select(_COLUMNS)
                .order("created_at")
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise ProfileResolutionError from exc
        return [_row_to_profile(row) for row in response.data or []]


def _row_to_profile(row: dict[str, object]) -> UserProfile:
    try:
        role = Role(row.get("role") or Role.USUARIO)
        status = AccountStatus(row.get("status") or AccountStatus.ATIVO)
    except ValueError as exc:
        raise ProfileResolutionError from exc
    created_at = row.get("created_at")
    return UserProfile(
        id=str(row["id"]),
        email=str(row.get("email") or ""),
        name=str(row.get("name") or DEFAULT_DISPLAY_NAME),
        role=role,
        phone=str(row.get("phone") or ""),
        location=str(row.get("location") or ""),
        status=status,
        created_at=datetime.fromisoformat(created_at)
        if isinstance(created_at, str)
        else None,
    )


def _profile_to_row(profile: UserProfile) -> dict[str, object]:
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
