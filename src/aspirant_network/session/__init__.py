"""
Session layer: authentication state, exam selection and route guards.
"""

from .auth import AuthSession, SessionState
from .exam import ExamSession
from .guards import (
    HOME_PATH,
    LOGIN_PATH,
    RouteDecision,
    is_public_path,
    protected_route,
    public_route,
    resolve_route,
)
from .onboarding import OnboardingProfile, complete_onboarding, discard_legacy_profile

__all__ = [
    "AuthSession",
    "ExamSession",
    "HOME_PATH",
    "LOGIN_PATH",
    "OnboardingProfile",
    "RouteDecision",
    "SessionState",
    "complete_onboarding",
    "discard_legacy_profile",
    "is_public_path",
    "protected_route",
    "public_route",
    "resolve_route",
]
