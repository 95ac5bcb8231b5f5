"""Session coordinator bridging identity provider events into session state."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from typing import Protocol

from evento_admin.domain.errors import (
    AuthProviderError,
    InvalidCredentialsFormat,
    LogoutError,
)
from evento_admin.domain.models import (
    Principal,
    SessionPhase,
    SessionState,
    UserProfile,
)
from evento_admin.services.profiles import ProfileService

logger = logging.getLogger(__name__)

SessionChangeCallback = Callable[[Principal | None], None]
SessionListener = Callable[[SessionState], None]
Unsubscribe = Callable[[], None]


class IdentityProvider(Protocol):
    """Interface for the hosted identity provider."""

    async def verify_credentials(self, email: str, password: str) -> Principal:
        """Sign in with email and password and return the principal."""

    async def terminate_session(self) -> None:
        """Sign out the current session."""

    async def on_session_change(self, callback: SessionChangeCallback) -> Unsubscribe:
        """Register for session changes, pushing the current session at once."""


@dataclass
class SessionCoordinator:
    """Single owner of the process-wide session state.

    Every publication carries a ticket drawn when the triggering event was
    observed. Publications are applied only in increasing ticket order, so a
    slow resolution never overwrites the result of a newer event.
    """

    identity_provider: IdentityProvider
    profile_service: ProfileService
    watch_buffer: int = 16
    _state: SessionState = field(default_factory=SessionState, init=False)
    _issued: int = field(default=0, init=False)
    _applied: int = field(default=0, init=False)
    _started: bool = field(default=False, init=False)
    _stopped: bool = field(default=False, init=False)
    _unsubscribe: Unsubscribe | None = field(default=None, init=False, repr=False)
    _loaded: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _pending: set[asyncio.Task[None]] = field(default_factory=set, init=False)
    _listeners: list[SessionListener] = field(default_factory=list, init=False)
    _watchers: set[asyncio.Queue[SessionState]] = field(
        default_factory=set, init=False
    )

    @property
    def state(self) -> SessionState:
        """Return the most recently published session state."""
        return self._state

    @property
    def phase(self) -> SessionPhase:
        """Return the coordinator's current phase."""
        if not self._started:
            return SessionPhase.UNINITIALIZED
        return self._state.phase

    async def start(self) -> None:
        """Register for identity provider session changes."""
        if self._started:
            return
        self._started = True
        self._unsubscribe = await self.identity_provider.on_session_change(
            self._on_identity_change
        )

    async def stop(self) -> None:
        """Unregister from the provider and cancel in-flight resolutions."""
        self._stopped = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    def subscribe(self, listener: SessionListener) -> Unsubscribe:
        """Call listener with the current state and every later publication."""
        self._listeners.append(listener)
        listener(self._state)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def watch(self) -> AsyncIterator[SessionState]:
        """Yield the current state followed by every publication."""
        queue: asyncio.Queue[SessionState] = asyncio.Queue(maxsize=self.watch_buffer)
        queue.put_nowait(self._state)
        self._watchers.add(queue)
        try:
            while True:
                yield await queue.get()
        finally:
            self._watchers.discard(queue)

    async def wait_until_loaded(self, timeout: float | None = None) -> SessionState:
        """Wait for the first identity resolution, up to timeout seconds."""
        try:
            await asyncio.wait_for(self._loaded.wait(), timeout)
        except TimeoutError:
            logger.warning("Session still loading after %s seconds", timeout)
        return self._state

    async def settle(self) -> SessionState:
        """Wait for every in-flight identity resolution to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        return self._state

    async def login(self, email: str, password: str) -> UserProfile:
        """Sign in, publish the resolved profile and return it.

        Raises AuthProviderError when the provider rejects the credentials and
        ProfileResolutionError when the profile cannot be loaded. The session
        state is left untouched in both cases. The publication is skipped when
        a newer session event landed while the profile was being resolved.
        """
        if not email or not password:
            raise InvalidCredentialsFormat
        try:
            principal = await self.identity_provider.verify_credentials(
                email, password
            )
        except AuthProviderError as exc:
            logger.warning("Login rejected for %s: %s", email, exc.kind)
            raise
        ticket = self._next_ticket()
        profile = await self.profile_service.fetch_or_create(principal)
        self._publish(ticket, profile)
        return profile

    async def logout(self) -> None:
        """Sign out and publish an empty session."""
        try:
            await self.identity_provider.terminate_session()
        except AuthProviderError as exc:
            logger.exception("Logout failed")
            raise LogoutError from exc
        self._publish(self._next_ticket(), None)

    def _on_identity_change(self, principal: Principal | None) -> None:
        if self._stopped:
            return
        ticket = self._next_ticket()
        task = asyncio.get_running_loop().create_task(
            self._resolve_identity(ticket, principal)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _resolve_identity(self, ticket: int, principal: Principal | None) -> None:
        profile: UserProfile | None = None
        if principal is not None:
            try:
                profile = await self.profile_service.fetch_or_create(principal)
            except Exception:
                logger.exception(
                    "Failed to resolve profile for principal %s", principal.id
                )
        self._publish(ticket, profile)

    def _next_ticket(self) -> int:
        self._issued += 1
        return self._issued

    def _publish(self, ticket: int, profile: UserProfile | None) -> None:
        if ticket <= self._applied:
            logger.debug("Discarding stale session resolution %s", ticket)
            return
        self._applied = ticket
        self._state = SessionState(user=profile, is_loading=False)
        self._loaded.set()
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Session listener failed")
        for queue in list(self._watchers):
            _offer_latest(queue, self._state)


def _offer_latest(queue: asyncio.Queue[SessionState], state: SessionState) -> None:
    """Enqueue state, dropping the oldest entry when the queue is full."""
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(state)
