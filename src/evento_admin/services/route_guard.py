"""Role-gated navigation decisions."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from evento_admin.domain.models import Role, SessionState


class RenderDecision(StrEnum):
    """Outcome of guarding a protected view."""

    SUSPEND = "suspend"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"
    RENDER = "render"


def parse_roles(values: Iterable[Role | str] | None) -> frozenset[Role] | None:
    """Convert role names into a role set, rejecting unknown names."""
    if values is None:
        return None
    roles: set[Role] = set()
    for value in values:
        try:
            roles.add(Role(value))
        except ValueError as exc:
            raise ValueError(f"Unknown role: {value!r}") from exc
    return frozenset(roles)


def guard(
    state: SessionState, required_roles: frozenset[Role] | None = None
) -> RenderDecision:
    """Decide whether a protected view may render for the session state.

    An explicitly empty role set admits nobody.
    """
    if state.is_loading:
        return RenderDecision.SUSPEND
    if state.user is None:
        return RenderDecision.REDIRECT_LOGIN
    if required_roles is not None and state.user.role not in required_roles:
        return RenderDecision.REDIRECT_UNAUTHORIZED
    return RenderDecision.RENDER


@dataclass(frozen=True)
class RouteGuard:
    """Guard bound to a route's allowed roles and redirect targets."""

    required_roles: frozenset[Role] | None = None
    login_path: str = "/login"
    unauthorized_path: str = "/unauthorized"

    def decide(self, state: SessionState) -> RenderDecision:
        """Return the render decision for the session state."""
        return guard(state, self.required_roles)

    def redirect_target(self, decision: RenderDecision) -> str | None:
        """Return where a decision redirects to, if anywhere."""
        if decision is RenderDecision.REDIRECT_LOGIN:
            return self.login_path
        if decision is RenderDecision.REDIRECT_UNAUTHORIZED:
            return self.unauthorized_path
        return None
