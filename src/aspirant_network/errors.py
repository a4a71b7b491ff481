"""Exception hierarchy for the Aspirant Network client."""

from typing import Dict, Optional


class AspirantError(Exception):
    """Base class for all client-side errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class StorageError(AspirantError):
    """Raised when the persistent store cannot be written."""


class AuthError(AspirantError):
    """Raised for invalid operations on the auth session."""


class AuthPersistenceError(AuthError):
    """Raised when session data was updated in memory but could not be persisted."""


class ExamSelectionError(AspirantError):
    """Raised when an exam switch is not allowed for the current user."""


class ValidationError(AspirantError):
    """Raised when client-side form validation fails."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        self.errors = errors or {}
        super().__init__(message)


class APIError(AspirantError):
    """Custom exception for API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401
