"""Authentication error taxonomy with user-facing messages."""

from enum import StrEnum


class AuthErrorKind(StrEnum):
    """Classified identity provider failures."""

    INVALID_EMAIL = "invalid-email"
    USER_DISABLED = "user-disabled"
    USER_NOT_FOUND = "user-not-found"
    WRONG_PASSWORD = "wrong-password"
    RATE_LIMITED = "rate-limited"
    NETWORK_FAILURE = "network-failure"
    INTERNAL_ERROR = "internal-error"
    UNKNOWN = "unknown"


_PROVIDER_MESSAGES: dict[AuthErrorKind, str] = {
    AuthErrorKind.INVALID_EMAIL: "Email inválido",
    AuthErrorKind.USER_DISABLED: "Usuário desativado",
    AuthErrorKind.USER_NOT_FOUND: "Usuário não encontrado",
    AuthErrorKind.WRONG_PASSWORD: "Senha incorreta",
    AuthErrorKind.RATE_LIMITED: "Muitas tentativas. Tente novamente mais tarde",
    AuthErrorKind.NETWORK_FAILURE: "Erro de conexão. Verifique sua internet",
    AuthErrorKind.INTERNAL_ERROR: "Erro interno. Tente novamente",
    AuthErrorKind.UNKNOWN: "Erro ao fazer login. Tente novamente",
}


def provider_error_message(kind: AuthErrorKind) -> str:
    """Return the localized message for a provider error kind."""
    return _PROVIDER_MESSAGES[kind]


class AuthError(Exception):
    """Base class for errors surfaced to dashboard users."""

    default_message = "Erro de autenticação. Tente novamente"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentialsFormat(AuthError):
    """Credentials were missing or malformed before reaching the provider."""

    default_message = "Informe email e senha"


class AuthProviderError(AuthError):
    """The identity provider rejected or failed a request."""

    def __init__(self, kind: AuthErrorKind, detail: str | None = None) -> None:
        super().__init__(provider_error_message(kind))
        self.kind = kind
        self.detail = detail


class ProfileResolutionError(AuthError):
    """Reading or creating a user profile failed."""

    default_message = "Erro ao carregar o perfil do usuário. Tente novamente"


class LogoutError(AuthError):
    """The identity provider failed to terminate the session."""

    default_message = "Erro ao fazer logout. Tente novamente"
