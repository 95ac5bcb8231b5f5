"""User profile resolution."""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol

from evento_admin.domain.models import (
    DEFAULT_DISPLAY_NAME,
    AccountStatus,
    Principal,
    Role,
    UserProfile,
)

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for user profiles."""

    async def get_profile(self, profile_id: str) -> UserProfile | None:
        """Return the stored profile for a principal id, if present."""

    async def upsert_profile(self, profile: UserProfile) -> None:
        """Store a profile unless one already exists under its id."""

    async def list_profiles(self) -> list[UserProfile]:
        """Return all stored profiles."""


@dataclass
class ProfileService:
    """Resolves the application profile behind a provider identity."""

    repository: ProfileRepository
    _inflight: dict[str, asyncio.Future[UserProfile]] = field(
        default_factory=dict, init=False, repr=False
    )

    async def fetch_or_create(self, principal: Principal) -> UserProfile:
        """Return the principal's profile, creating it on first sign-in.

        Concurrent calls for the same principal share a single lookup so the
        profile is created at most once per process.
        """
        pending = self._inflight.get(principal.id)
        if pending is None:
            pending = asyncio.ensure_future(self._resolve(principal))
            self._inflight[principal.id] = pending
            pending.add_done_callback(
                lambda done, key=principal.id: self._forget(key, done)
            )
        return await asyncio.shield(pending)

    async def list_profiles(self) -> list[UserProfile]:
        """Return every stored profile."""
        return await self.repository.list_profiles()

    async def _resolve(self, principal: Principal) -> UserProfile:
        stored = await self.repository.get_profile(principal.id)
        if stored is not None:
            return replace(stored, id=principal.id, email=principal.email)

        profile = UserProfile(
            id=principal.id,
            email=principal.email,
            name=principal.display_name or DEFAULT_DISPLAY_NAME,
            role=Role.USUARIO,
            phone="",
            location="",
            status=AccountStatus.ATIVO,
            created_at=datetime.now(tz=UTC),
        )
        await self.repository.upsert_profile(profile)
        # The upsert keeps a row written concurrently by another process.
        stored = await self.repository.get_profile(principal.id)
        if stored is not None and stored != profile:
            logger.info("Kept existing profile for principal %s", principal.id)
            return replace(stored, id=principal.id, email=principal.email)
        logger.info("Created profile for principal %s", principal.id)
        return profile

    def _forget(self, key: str, done: asyncio.Future[UserProfile]) -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]
