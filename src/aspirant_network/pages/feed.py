"""
Paginated feed of questions, resources or stories for the current exam.
"""

from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..api import AspirantAPI
from ..config import get_settings
from ..errors import APIError
from ..models import FeedItem, Pagination
from ..session import ExamSession
from ..sync import Mutation, MutationResult, OptimisticUpdater
from .common import UNEXPECTED_RESPONSE, apply_vote, resolve_vote, saved_flag, unwrap, vote_counts

_FEED_ITEM = TypeAdapter(FeedItem)

FEED_KINDS = {
    "questions": "question",
    "resources": "resource",
    "stories": "story",
}


class Feed:
    """
    One listing page of the feed.

    A page response is dropped when a newer load was issued meanwhile or the
    current exam changed while it was in flight.
    """

    def __init__(
        self,
        api: AspirantAPI,
        exam: ExamSession,
        updater: OptimisticUpdater,
        kind: str = "questions",
        page_size: int = 20,
    ):
        if kind not in FEED_KINDS:
            raise ValueError(f"Unknown feed kind '{kind}', expected one of {sorted(FEED_KINDS)}")
        self.api = api
        self.exam = exam
        self.updater = updater
        self.kind = kind
        self.page_size = max(1, min(page_size, get_settings().max_page_size))
        self.items: List[Any] = []
        self.pagination = Pagination(page=1, limit=self.page_size)
        self.loading = False
        self.error: Optional[str] = None

    @property
    def post_type(self) -> str:
        return FEED_KINDS[self.kind]

    def _service(self):
        return getattr(self.api, self.kind)

    def load(self, page: int = 1, **filters: Any) -> bool:
        """
        Fetch a page for the current exam.

        Returns:
            True if ``items`` was replaced
        """
        exam = self.exam.current_exam
        fence = self.updater.fence
        list_key = f"feed:{self.kind}"
        ticket = fence.begin(list_key)
        self.loading = True
        try:
            payload = self._service().list(page=page, limit=self.page_size, exam=exam, **filters)
        except APIError as e:
            logger.error(f"Error fetching {self.kind}: {e.message}")
            self.error = e.message
            return False
        finally:
            if fence.is_latest(list_key, ticket):
                self.loading = False

        if not fence.is_latest(list_key, ticket) or exam != self.exam.current_exam:
            logger.debug(f"Dropping superseded {self.kind} page {page}")
            return False

        pagination = payload.get("pagination")
        try:
            items = self._parse_items(payload, exam)
            if isinstance(pagination, dict):
                page_info = Pagination.model_validate(pagination)
            else:
                page_info = Pagination(page=page, limit=self.page_size)
        except PydanticValidationError as e:
            logger.error(f"Unexpected {self.kind} payload: {e.error_count()} validation errors")
            self.error = UNEXPECTED_RESPONSE
            return False

        self.items = items
        self.pagination = page_info
        self.error = None
        return True

    def next_page(self, **filters: Any) -> bool:
        if not self.pagination.has_next:
            return False
        return self.load(page=self.pagination.page + 1, **filters)

    def _parse_items(self, payload: Dict[str, Any], exam: Optional[str]) -> List[Any]:
        raw = unwrap(payload, self.kind)
        if not isinstance(raw, list):
            raw = []
        items = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            data = dict(entry)
            data.setdefault("postType", self.post_type)
            item = _FEED_ITEM.validate_python(data)
            if exam and item.exam and item.exam != exam:
                continue
            items.append(item)
        return items

    def get(self, item_id: str):
        return next((item for item in self.items if item.id == item_id), None)

    def _replace(self, item_id: str, update: Callable[[Any], Any]) -> None:
        self.items = [update(item) if item.id == item_id else item for item in self.items]

    def _restorer(self, item_id: str) -> Callable[[], None]:
        """Undo for one item: puts back its current state unless it has left the list."""
        original = self.get(item_id)

        def restore() -> None:
            if original is not None:
                self._replace(item_id, lambda _item: original)

        return restore

    def vote(self, item_id: str, vote_type) -> MutationResult:
        if self.kind == "resources":
            raise ValueError("Resources are rated, not voted on")
        current = self.get(item_id)
        vote = resolve_vote(current.user_vote if current is not None else None, vote_type)

        def reconcile(response) -> None:
            update = vote_counts(response)
            if update:
                self._replace(item_id, lambda item: item.model_copy(update=update))

        return self.updater.run(Mutation(
            key=f"{self.post_type}:{item_id}:vote",
            request=lambda: self._service().vote(item_id, vote),
            apply=lambda _r: self._replace(item_id, lambda item: apply_vote(item, vote)),
            compensate=self._restorer(item_id),
            reconcile=reconcile,
            optimistic=True,
            error_title="Failed to vote",
        ))

    def toggle_save(self, item_id: str) -> MutationResult:
        def reconcile(response) -> None:
            saved = saved_flag(response)
            if saved is not None:
                self._replace(item_id, lambda item: item.model_copy(update={"has_saved": saved}))

        return self.updater.run(Mutation(
            key=f"{self.post_type}:{item_id}:save",
            request=lambda: self._service().toggle_save(item_id),
            apply=lambda _r: self._replace(
                item_id, lambda item: item.model_copy(update={"has_saved": not item.has_saved})
            ),
            compensate=self._restorer(item_id),
            reconcile=reconcile,
            optimistic=True,
            error_title=f"Failed to save {self.post_type}",
        ))
