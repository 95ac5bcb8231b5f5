"""Ties the published session to the client that signed in."""

import logging
import secrets
from dataclasses import dataclass, field

from evento_admin.domain.models import SessionState

logger = logging.getLogger(__name__)


@dataclass
class SessionBinding:
    """Opaque token held by the one client that owns the current session.

    Clients presenting any other token, or none, see an unauthenticated
    session with the same loading flag.
    """

    _token: str | None = field(default=None, init=False, repr=False)
    _user_id: str | None = field(default=None, init=False)

    def issue(self, state: SessionState) -> str | None:
        """Bind the signed-in user to a fresh token and return it."""
        if state.user is None:
            return None
        if self._user_id is not None:
            logger.info("Session handed over from %s", self._user_id)
        self._token = secrets.token_urlsafe(32)
        self._user_id = state.user.id
        return self._token

    def release(self) -> None:
        """Forget the current token."""
        self._token = None
        self._user_id = None

    def owns(self, token: str | None, state: SessionState) -> bool:
        """Return whether token belongs to the user in state."""
        if token is None or self._token is None or state.user is None:
            return False
        return (
            secrets.compare_digest(token.encode(), self._token.encode())
            and state.user.id == self._user_id
        )

    def view(self, token: str | None, state: SessionState) -> SessionState:
        """Return the session as seen by the holder of token."""
        if self.owns(token, state):
            return state
        return SessionState(user=None, is_loading=state.is_loading)
