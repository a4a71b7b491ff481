"""
Authentication session state.

AuthSession owns ``{user, token, loading}`` and is the single authority for
whether the client is signed in. It hydrates once from a KeyValueStore and
writes every change back to it.
"""

import json
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..errors import AuthError, AuthPersistenceError, StorageError
from ..models import UserSummary
from ..storage import CURRENT_EXAM_KEY, TOKEN_KEY, USER_KEY, KeyValueStore

UserListener = Callable[[Optional[UserSummary]], None]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    HYDRATING = "hydrating"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthSession:
    """
    Session state machine: UNINITIALIZED -> HYDRATING -> {AUTHENTICATED, ANONYMOUS}.

    ``login`` and ``logout`` move between the two settled states from anywhere.
    Token and user are always set and cleared together.
    """

    def __init__(self, store: KeyValueStore):
        """
        Initialize the session.

        Args:
            store: Persistent store the session hydrates from and writes to
        """
        self.store = store
        self.state = SessionState.UNINITIALIZED
        self._user: Optional[UserSummary] = None
        self._token: Optional[str] = None
        self._listeners: List[UserListener] = []

    @property
    def user(self) -> Optional[UserSummary]:
        return self._user

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def loading(self) -> bool:
        return self.state in (SessionState.UNINITIALIZED, SessionState.HYDRATING)

    def subscribe(self, listener: UserListener) -> Callable[[], None]:
        """
        Register a callback invoked with the new user after every user change.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user)

    def hydrate(self) -> SessionState:
        """
        Restore the session from the store.

        Corrupted user data clears both keys and leaves the session anonymous.

        Returns:
            The settled state
        """
        self.state = SessionState.HYDRATING
        try:
            stored_token = self.store.get_item(TOKEN_KEY)
            stored_user = self.store.get_item(USER_KEY)

            if stored_token and stored_user:
                user = UserSummary.model_validate(json.loads(stored_user))
                self._token = stored_token
                self._user = user
            else:
                self._token = None
                self._user = None
        except (json.JSONDecodeError, TypeError, PydanticValidationError) as e:
            logger.error(f"Error initializing auth, clearing stored session: {e}")
            self._token = None
            self._user = None
            self._clear_keys(TOKEN_KEY, USER_KEY)

        self.state = SessionState.AUTHENTICATED if self.is_authenticated() else SessionState.ANONYMOUS
        logger.debug(f"Auth session hydrated: {self.state.value}")
        self._notify()
        return self.state

    def login(self, user: Union[UserSummary, Mapping[str, Any]], token: str) -> None:
        """
        Store user and token and move to AUTHENTICATED.

        Raises:
            AuthError: If token or user is empty
            AuthPersistenceError: If the store rejects the write; the in-memory
                session is already updated at that point
        """
        if not token:
            raise AuthError("A token is required to log in")
        user = self._coerce_user(user)

        self._user = user
        self._token = token
        self.state = SessionState.AUTHENTICATED
        logger.info(f"User '{user.username}' logged in")
        self._notify()

        try:
            self.store.set_item(TOKEN_KEY, token)
            self.store.set_item(USER_KEY, json.dumps(user.to_wire()))
        except StorageError as e:
            logger.error(f"Error during login: {e}")
            raise AuthPersistenceError("Failed to save authentication data") from e

    def logout(self) -> None:
        """Clear the session in memory and in the store. Safe to call repeatedly."""
        had_user = self._user is not None
        self._user = None
        self._token = None
        self.state = SessionState.ANONYMOUS
        self._clear_keys(TOKEN_KEY, USER_KEY, CURRENT_EXAM_KEY)
        if had_user:
            logger.info("User logged out")
            self._notify()

    def update_user(self, user: Union[UserSummary, Mapping[str, Any]]) -> UserSummary:
        """
        Replace the current user, or merge a mapping of changed fields into it.

        Raises:
            AuthError: If there is no authenticated session or the data is invalid
            AuthPersistenceError: If the updated user could not be persisted
        """
        if not self.is_authenticated():
            raise AuthError("Cannot update user without an authenticated session")

        if isinstance(user, UserSummary):
            updated = user
        else:
            merged = self._user.to_wire()
            try:
                merged.update(UserSummary.model_validate(dict(user)).model_dump(
                    by_alias=True, exclude_unset=True, mode="json"
                ))
                updated = UserSummary.model_validate(merged)
            except PydanticValidationError as e:
                raise AuthError(f"Invalid user data: {e}") from e

        self._user = updated
        self._notify()

        try:
            self.store.set_item(USER_KEY, json.dumps(updated.to_wire()))
        except StorageError as e:
            logger.error(f"Error updating user: {e}")
            raise AuthPersistenceError("Failed to update user data") from e
        return updated

    def is_authenticated(self) -> bool:
        # No expiry check: a stale token passes until the backend rejects it.
        return self._token is not None and self._user is not None

    def get_auth_header(self) -> Dict[str, str]:
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def _coerce_user(self, user: Union[UserSummary, Mapping[str, Any], None]) -> UserSummary:
        if isinstance(user, UserSummary):
            return user
        if not user:
            raise AuthError("User data is required to log in")
        try:
            return UserSummary.model_validate(dict(user))
        except PydanticValidationError as e:
            raise AuthError(f"Invalid user data: {e}") from e

    def _clear_keys(self, *keys: str) -> None:
        for key in keys:
            try:
                self.store.remove_item(key)
            except StorageError as e:
                logger.error(f"Failed to remove '{key}' from session store: {e}")
