"""Domain models for the event admin dashboard."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

DEFAULT_DISPLAY_NAME = "Usuário"


class Role(StrEnum):
    """Roles that govern route access."""

    ADMIN = "admin"
    ORGANIZADOR = "organizador"
    USUARIO = "usuario"


class AccountStatus(StrEnum):
    """Lifecycle flag of a user profile."""

    ATIVO = "ativo"
    INATIVO = "inativo"


class SessionPhase(StrEnum):
    """Observable phase of the session coordinator."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class Principal:
    """Identity reported by the identity provider."""

    id: str
    email: str
    display_name: str | None = None


@dataclass(frozen=True)
class UserProfile:
    """Application profile stored for a principal."""

    id: str
    email: str
    name: str = DEFAULT_DISPLAY_NAME
    role: Role = Role.USUARIO
    phone: str = ""
    location: str = ""
    status: AccountStatus = AccountStatus.ATIVO
    created_at: datetime | None = None


@dataclass(frozen=True)
class SessionState:
    """Published snapshot of who is logged in."""

    user: UserProfile | None = None
    is_loading: bool = True

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def phase(self) -> SessionPhase:
        if self.is_loading:
            return SessionPhase.LOADING
        if self.user is None:
            return SessionPhase.UNAUTHENTICATED
        return SessionPhase.AUTHENTICATED
