"""Supabase Auth implementation of the identity provider."""

import logging
from dataclasses import dataclass

import httpx
from supabase import AsyncClient, AuthApiError, AuthError, AuthRetryableError

from evento_admin.domain.errors import AuthErrorKind, AuthProviderError
from evento_admin.domain.models import Principal
from evento_admin.services.session import (
    IdentityProvider,
    SessionChangeCallback,
    Unsubscribe,
)

logger = logging.getLogger(__name__)

_HTTP_TOO_MANY_REQUESTS = 429
_HTTP_SERVER_ERROR = 500

_ERROR_CODES: dict[str, AuthErrorKind] = {
    "email_address_invalid": AuthErrorKind.INVALID_EMAIL,
    "email_address_not_authorized": AuthErrorKind.INVALID_EMAIL,
    "user_banned": AuthErrorKind.USER_DISABLED,
    "user_not_found": AuthErrorKind.USER_NOT_FOUND,
    "invalid_credentials": AuthErrorKind.WRONG_PASSWORD,
    "over_request_rate_limit": AuthErrorKind.RATE_LIMITED,
    "over_email_send_rate_limit": AuthErrorKind.RATE_LIMITED,
    "unexpected_failure": AuthErrorKind.INTERNAL_ERROR,
    "request_timeout": AuthErrorKind.NETWORK_FAILURE,
}


def classify_auth_error(error: Exception) -> AuthErrorKind:
    """Map a Supabase Auth or transport error onto an error kind."""
    if isinstance(error, AuthRetryableError | httpx.TransportError):
        return AuthErrorKind.NETWORK_FAILURE
    if isinstance(error, AuthApiError):
        code = getattr(error, "code", None)
        if code in _ERROR_CODES:
            return _ERROR_CODES[code]
        status = getattr(error, "status", None) or 0
        if status == _HTTP_TOO_MANY_REQUESTS:
            return AuthErrorKind.RATE_LIMITED
        if status >= _HTTP_SERVER_ERROR:
            return AuthErrorKind.INTERNAL_ERROR
    return AuthErrorKind.UNKNOWN


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider backed by Supabase Auth."""

    client: AsyncClient

    async def verify_credentials(self, email: str, password: str) -> Principal:
        """Sign in with email and password."""
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise AuthProviderError(classify_auth_error(exc), detail=str(exc)) from exc
        if response.user is None:
            raise AuthProviderError(AuthErrorKind.UNKNOWN, detail="missing user")
        return _principal_from_user(response.user)

    async def terminate_session(self) -> None:
        """Sign out the current session."""
        try:
            await self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as exc:
            raise AuthProviderError(classify_auth_error(exc), detail=str(exc)) from exc

    async def on_session_change(self, callback: SessionChangeCallback) -> Unsubscribe:
        """Forward Supabase auth events and push the current session."""

        def listener(event: str, session) -> None:  # type: ignore[no-untyped-def]
            logger.debug("Supabase auth event %s", event)
            callback(_principal_from_session(session))

        subscription = self.client.auth.on_auth_state_change(listener)
        try:
            session = await self.client.auth.get_session()
        except (AuthError, httpx.HTTPError):
            logger.warning("Could not restore the stored Supabase session")
            session = None
        callback(_principal_from_session(session))
        return subscription.unsubscribe


def _principal_from_session(session) -> Principal | None:  # type: ignore[no-untyped-def]
    if session is None or session.user is None:
        return None
    return _principal_from_user(session.user)


def _principal_from_user(user) -> Principal:  # type: ignore[no-untyped-def]
    metadata = user.user_metadata or {}
    display_name = metadata.get("full_name") or metadata.get("name")
    return Principal(
        id=str(user.id),
        email=user.email or "",
        display_name=str(display_name) if display_name else None,
    )
