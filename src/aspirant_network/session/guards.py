"""
Route guards.

Guards turn the auth session into a navigation decision: render the page,
show a loading placeholder while the session hydrates, or redirect.
"""

from dataclasses import dataclass
from typing import Optional

from .auth import AuthSession

LOGIN_PATH = "/login"
HOME_PATH = "/home"
ROOT_PATH = "/"

PUBLIC_PATHS = ("/login", "/signup", "/forgot-password")
PUBLIC_PREFIXES = ("/reset-password/",)


@dataclass(frozen=True)
class RouteDecision:
    """Outcome of a guard check."""

    allowed: bool
    redirect_to: Optional[str] = None
    replace: bool = True
    loading: bool = False

    @classmethod
    def allow(cls) -> "RouteDecision":
        return cls(allowed=True)

    @classmethod
    def wait(cls) -> "RouteDecision":
        return cls(allowed=False, loading=True)

    @classmethod
    def redirect(cls, path: str) -> "RouteDecision":
        return cls(allowed=False, redirect_to=path)


def protected_route(auth: AuthSession) -> RouteDecision:
    """Only signed-in users may pass; everyone else goes to the login page."""
    if auth.loading:
        return RouteDecision.wait()
    if not auth.is_authenticated():
        return RouteDecision.redirect(LOGIN_PATH)
    return RouteDecision.allow()


def public_route(auth: AuthSession) -> RouteDecision:
    """Login/signup pages: signed-in users are sent to the home feed."""
    if auth.loading:
        return RouteDecision.wait()
    if auth.is_authenticated():
        return RouteDecision.redirect(HOME_PATH)
    return RouteDecision.allow()


def is_public_path(path: str) -> bool:
    normalised = path.rstrip("/") or ROOT_PATH
    if normalised in PUBLIC_PATHS:
        return True
    return any(path.startswith(prefix) and len(path) > len(prefix) for prefix in PUBLIC_PREFIXES)


def resolve_route(path: str, auth: AuthSession) -> RouteDecision:
    """Pick the guard for a path; ``/`` always redirects to the home feed."""
    if (path.rstrip("/") or ROOT_PATH) == ROOT_PATH:
        return RouteDecision.redirect(HOME_PATH)
    if is_public_path(path):
        return public_route(auth)
    return protected_route(auth)
