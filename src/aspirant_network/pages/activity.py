"""
Activity (notification) feed state.
"""

from typing import List, Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..api import AspirantAPI
from ..errors import APIError
from ..models import Activity
from ..sync import Mutation, MutationResult, OptimisticUpdater
from .common import UNEXPECTED_RESPONSE, as_list

LIST_KEY = "activities:list"


class ActivityFeed:
    """
    The signed-in user's activities plus the unread counter.

    ``mark_read`` and ``mark_all_read`` update the list in place once the
    server confirms, so the page never needs a full reload.
    """

    def __init__(self, api: AspirantAPI, updater: OptimisticUpdater, limit: int = 100):
        self.api = api
        self.updater = updater
        self.limit = limit
        self.activities: List[Activity] = []
        self.unread_count = 0
        self.loading = False
        self.error: Optional[str] = None

    def load(self, unread_only: bool = False) -> bool:
        """
        Fetch activities. A response overtaken by a newer load is dropped.

        Returns:
            True if local state was replaced
        """
        fence = self.updater.fence
        ticket = fence.begin(LIST_KEY)
        self.loading = True
        try:
            payload = self.api.activities.list(limit=self.limit, unread_only=unread_only)
        except APIError as e:
            logger.error(f"Error fetching activities: {e.message}")
            self.error = e.message
            return False
        finally:
            if fence.is_latest(LIST_KEY, ticket):
                self.loading = False

        if not fence.is_latest(LIST_KEY, ticket):
            logger.debug("Dropping superseded activities response")
            return False

        try:
            self.activities = [Activity.model_validate(item) for item in as_list(payload, "data")]
        except PydanticValidationError as e:
            logger.error(f"Unexpected activities payload: {e.error_count()} validation errors")
            self.error = UNEXPECTED_RESPONSE
            return False
        self.unread_count = int(payload.get("unreadCount") or 0)
        self.error = None
        return True

    def get(self, activity_id: str) -> Optional[Activity]:
        return next((a for a in self.activities if a.id == activity_id), None)

    def mark_read(self, activity_id: str) -> MutationResult:
        activity = self.get(activity_id)
        if activity is None or activity.is_read:
            return MutationResult(ok=True)

        def apply(_response) -> None:
            self.unread_count = max(0, self.unread_count - 1)
            self.activities = [
                a.model_copy(update={"is_read": True}) if a.id == activity_id else a
                for a in self.activities
            ]

        return self.updater.run(Mutation(
            key=f"activity:{activity_id}",
            request=lambda: self.api.activities.mark_read(activity_id),
            apply=apply,
            error_title="Error marking activity as read",
        ))

    def mark_all_read(self) -> MutationResult:
        def apply(_response) -> None:
            self.unread_count = 0
            self.activities = [a.model_copy(update={"is_read": True}) for a in self.activities]

        return self.updater.run(Mutation(
            key="activities:read-all",
            request=self.api.activities.mark_all_read,
            apply=apply,
            error_title="Error marking all as read",
        ))
