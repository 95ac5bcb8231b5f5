"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from evento_admin.config import Settings
from evento_admin.containers import AppContainer
from evento_admin.domain.errors import (
    AuthErrorKind,
    AuthProviderError,
    ProfileResolutionError,
)
from evento_admin.domain.models import Principal, UserProfile
from evento_admin.services.profiles import ProfileRepository, ProfileService
from evento_admin.services.session import (
    IdentityProvider,
    SessionChangeCallback,
    SessionCoordinator,
    Unsubscribe,
)


@dataclass
class InMemoryProfileRepository(ProfileRepository):
    """In-memory profile repository for tests."""

    profiles: dict[str, UserProfile] = field(default_factory=dict)
    get_calls: int = 0
    upsert_calls: int = 0
    fail_reads: bool = False
    fail_writes: bool = False
    gate: asyncio.Event | None = None

    async def get_profile(self, profile_id: str) -> UserProfile | None:
        self.get_calls += 1
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_reads:
            raise ProfileResolutionError
        return self.profiles.get(profile_id)

    async def upsert_profile(self, profile: UserProfile) -> None:
        self.upsert_calls += 1
        await asyncio.sleep(0)
        if self.fail_writes:
            raise ProfileResolutionError
        self.profiles.setdefault(profile.id, profile)

    async def list_profiles(self) -> list[UserProfile]:
        if self.fail_reads:
            raise ProfileResolutionError
        return list(self.profiles.values())


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Fake identity provider that pushes session changes like Supabase."""

    accounts: dict[str, tuple[str, Principal]] = field(default_factory=dict)
    current: Principal | None = None
    login_error: AuthProviderError | None = None
    logout_error: AuthProviderError | None = None
    callbacks: list[SessionChangeCallback] = field(default_factory=list)
    unsubscribed: int = 0

    def add_account(self, email: str, password: str, principal: Principal) -> None:
        self.accounts[email] = (password, principal)

    async def verify_credentials(self, email: str, password: str) -> Principal:
        if self.login_error is not None:
            raise self.login_error
        account = self.accounts.get(email)
        if account is None:
            raise AuthProviderError(AuthErrorKind.USER_NOT_FOUND)
        expected_password, principal = account
        if password != expected_password:
            raise AuthProviderError(AuthErrorKind.WRONG_PASSWORD)
        self.current = principal
        self.emit(principal)
        return principal

    async def terminate_session(self) -> None:
        if self.logout_error is not None:
            raise self.logout_error
        self.current = None
        self.emit(None)

    async def on_session_change(self, callback: SessionChangeCallback) -> Unsubscribe:
        self.callbacks.append(callback)
        callback(self.current)

        def unsubscribe() -> None:
            self.callbacks.remove(callback)
            self.unsubscribed += 1

        return unsubscribe

    def emit(self, principal: Principal | None) -> None:
        for callback in list(self.callbacks):
            callback(principal)


ADMIN = Principal(id="admin-1", email="admin@evento.com", display_name="Ana Admin")
ORGANIZER = Principal(id="org-1", email="org@evento.com", display_name="Otto")
NEWCOMER = Principal(id="u123", email="novo@evento.com", display_name=None)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoiYW5vbiJ9."
            "c2lnbmF0dXJl"
        ),
        session_bootstrap_timeout=1.0,
    )


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    provider = FakeIdentityProvider()
    provider.add_account(ADMIN.email, "Admin123", ADMIN)
    provider.add_account(ORGANIZER.email, "Org12345", ORGANIZER)
    provider.add_account(NEWCOMER.email, "Novo1234", NEWCOMER)
    return provider


@pytest.fixture
def container(
    settings: Settings,
    profile_repository: InMemoryProfileRepository,
    identity_provider: FakeIdentityProvider,
) -> AppContainer:
    profile_service = ProfileService(profile_repository)
    coordinator = SessionCoordinator(
        identity_provider=identity_provider,
        profile_service=profile_service,
    )

    async def close_resources() -> None:
        await coordinator.stop()

    return AppContainer(
        settings=settings,
        profile_service=profile_service,
        session_coordinator=coordinator,
        close_resources=close_resources,
    )
