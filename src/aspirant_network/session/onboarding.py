"""
First-run onboarding.

Onboarding is a one-time setup step: the profile is validated locally, the
account is created through the API, and the returned user and token are
written into the regular auth session.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

from loguru import logger

from ..api.services import AuthService
from ..errors import APIError, StorageError, ValidationError
from ..models import Exam, Level
from ..storage import LEGACY_ONBOARDING_KEY, KeyValueStore
from .auth import AuthSession

EXAM_VALUES = {exam.value for exam in Exam}
LEVEL_VALUES = {level.value for level in Level}


@dataclass
class OnboardingProfile:
    name: str
    username: str
    email: str
    password: str
    primary_exam: str
    level: str
    attempt_year: int = field(default_factory=lambda: date.today().year + 1)

    def validate(self) -> Dict[str, str]:
        """Return field -> message for every failing rule."""
        errors: Dict[str, str] = {}
        if not self.name.strip():
            errors["name"] = "Name is required"
        if not self.username.strip():
            errors["username"] = "Username is required"
        if not self.email.strip():
            errors["email"] = "Email is required"
        if not self.password:
            errors["password"] = "Password is required"
        if not self.primary_exam:
            errors["primaryExam"] = "Please select an exam"
        elif self.primary_exam not in EXAM_VALUES:
            errors["primaryExam"] = f"Unknown exam '{self.primary_exam}'"
        if not self.level:
            errors["level"] = "Please select your level"
        elif self.level not in LEVEL_VALUES:
            errors["level"] = f"Unknown level '{self.level}'"
        if self.attempt_year < date.today().year:
            errors["attemptYear"] = "Attempt year cannot be in the past"
        return errors

    def to_signup_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name.strip(),
            "username": self.username.strip(),
            "email": self.email.strip(),
            "password": self.password,
            "primaryExam": self.primary_exam,
            "attemptYear": self.attempt_year,
            "level": self.level,
        }


def discard_legacy_profile(store: KeyValueStore) -> bool:
    """Remove the profile the old standalone onboarding flow kept; True if one existed."""
    if store.get_item(LEGACY_ONBOARDING_KEY) is None:
        return False
    try:
        store.remove_item(LEGACY_ONBOARDING_KEY)
    except StorageError as e:
        logger.warning(f"Could not remove legacy onboarding profile: {e}")
        return False
    logger.info("Removed legacy onboarding profile from session store")
    return True


def complete_onboarding(
    profile: OnboardingProfile,
    auth: AuthSession,
    auth_service: AuthService,
    otp: Optional[str] = None,
) -> None:
    """
    Create the account and sign the new user in.

    Raises:
        ValidationError: If the profile fails client-side validation
        APIError: If the backend rejects the signup
    """
    errors = profile.validate()
    if errors:
        raise ValidationError("Please fix the highlighted fields", errors)

    if otp:
        auth_service.verify_otp(profile.email.strip().lower(), otp)

    response = auth_service.signup(profile.to_signup_payload())
    token = response.get("token")
    user = response.get("user")
    if not token or not user:
        raise APIError("Signup response did not include a token and user")

    auth.login(user, token)
    discard_legacy_profile(auth.store)
