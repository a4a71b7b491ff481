"""
The signed-in user's own questions, answers and resources, plus settings.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from ..api import AspirantAPI
from ..errors import APIError
from ..models import Pagination
from ..notifications import ToastQueue
from ..session import AuthSession
from ..sync import Mutation, MutationResult, OptimisticUpdater
from .common import as_list

PROFILE_TABS = ("questions", "answers", "resources")

# List filter that selects the owner's items on each tab
OWNER_FILTERS = {"questions": "createdBy", "answers": "author", "resources": "uploadedBy"}


class ProfileActivity:
    """One tab of the profile page with per-tab item counts."""

    def __init__(
        self,
        api: AspirantAPI,
        updater: OptimisticUpdater,
        user_id: str,
        toasts: Optional[ToastQueue] = None,
    ):
        self.api = api
        self.updater = updater
        self.user_id = user_id
        self.toasts = toasts
        self.active_tab = "questions"
        self.items: List[Dict[str, Any]] = []
        self.counts: Dict[str, int] = {tab: 0 for tab in PROFILE_TABS}
        self.error: Optional[str] = None

    def _service(self, tab: str):
        return getattr(self.api, tab)

    def load(self, tab: str = "questions") -> bool:
        if tab not in PROFILE_TABS:
            raise ValueError(f"Unknown profile tab '{tab}'")
        fence = self.updater.fence
        ticket = fence.begin("profile:list")
        self.active_tab = tab
        try:
            payload = self._service(tab).list(**{OWNER_FILTERS[tab]: self.user_id})
        except APIError as e:
            logger.error(f"Error fetching activity: {e.message}")
            self.error = e.message
            self.items = []
            return False

        if not fence.is_latest("profile:list", ticket):
            return False

        self.items = as_list(payload, tab) or as_list(payload, "data")
        pagination = payload.get("pagination")
        total = Pagination.model_validate(pagination).total if isinstance(pagination, dict) else None
        self.counts[tab] = total if total is not None else len(self.items)
        self.error = None
        return True

    def delete(self, item_id: str) -> MutationResult:
        tab = self.active_tab

        def apply(_response) -> None:
            self.items = [item for item in self.items if item.get("_id") != item_id]
            self.counts[tab] = max(0, self.counts[tab] - 1)
            if self.toasts is not None:
                self.toasts.success("Deleted successfully", f"Your {tab[:-1]} has been deleted.")

        return self.updater.run(Mutation(
            key=f"{tab[:-1]}:{item_id}:delete",
            request=lambda: self._service(tab).delete(item_id),
            apply=apply,
            error_title="Delete failed",
        ))

    def toggle_solved(self, question_id: str) -> MutationResult:
        if self.active_tab != "questions":
            raise ValueError("Only questions can be marked as solved")
        current = next((item for item in self.items if item.get("_id") == question_id), None)
        current_status = bool(current and current.get("isSolved"))

        def apply(_response) -> None:
            self.items = [
                {**item, "isSolved": not current_status} if item.get("_id") == question_id else item
                for item in self.items
            ]

        return self.updater.run(Mutation(
            key=f"question:{question_id}:solve",
            request=lambda: self.api.questions.mark_solved(question_id),
            apply=apply,
            error_title="Failed to update question",
        ))


def save_settings(api: AspirantAPI, auth: AuthSession, updates: Dict[str, Any]) -> Dict[str, Any]:
    """
    Persist profile settings and refresh the session user from the response.

    Raises:
        APIError: If the backend rejects the update
    """
    payload = api.users.update_settings(updates)
    user = payload.get("user") or (payload.get("data") or {}).get("user")
    if user:
        auth.update_user(user)
    return payload


def change_primary_exam(api: AspirantAPI, auth: AuthSession, primary_exam: str) -> Dict[str, Any]:
    """
    Change the user's primary exam on the server and in the session.

    The exam session follows automatically through its auth subscription.
    """
    payload = api.users.change_primary_exam(primary_exam)
    user = payload.get("user") or (payload.get("data") or {}).get("user")
    if user:
        auth.update_user(user)
    else:
        auth.update_user({"primaryExam": primary_exam})
    return payload
