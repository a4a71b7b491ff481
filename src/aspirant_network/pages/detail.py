"""
Detail pages for a single question, resource or story.

Each page keeps the loaded item and runs its actions through the shared
OptimisticUpdater. Votes and save toggles are applied optimistically and
reverted from a snapshot on failure; solving and rating wait for the server.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ..api import AspirantAPI
from ..errors import APIError
from ..models import Answer, Question, Resource, Story
from ..sync import Mutation, MutationResult, OptimisticUpdater
from .common import (
    UNEXPECTED_RESPONSE,
    apply_rating,
    apply_vote,
    as_list,
    resolve_vote,
    saved_flag,
    unwrap,
    vote_counts,
)


class _DetailPage:
    kind = ""

    def __init__(self, api: AspirantAPI, updater: OptimisticUpdater, item_id: str):
        self.api = api
        self.updater = updater
        self.item_id = item_id
        self.item = None
        self.loading = False
        self.error: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.kind}:{self.item_id}"

    def _fetch(self) -> Dict[str, Any]:
        raise NotImplementedError

    def _parse(self, body: Dict[str, Any]):
        raise NotImplementedError

    def load(self) -> bool:
        fence = self.updater.fence
        load_key = f"{self.key}:load"
        ticket = fence.begin(load_key)
        self.loading = True
        try:
            payload = self._fetch()
        except APIError as e:
            logger.error(f"Error fetching {self.key}: {e.message}")
            self.error = e.message
            return False
        finally:
            if fence.is_latest(load_key, ticket):
                self.loading = False

        if not fence.is_latest(load_key, ticket):
            return False

        body = unwrap(payload)
        try:
            self.item = self._parse(body if isinstance(body, dict) else {})
        except PydanticValidationError as e:
            logger.error(f"Unexpected {self.key} payload: {e.error_count()} validation errors")
            self.error = UNEXPECTED_RESPONSE
            return False
        self.error = None
        return True

    def _require_item(self):
        if self.item is None:
            raise RuntimeError(f"{self.key} has not been loaded")
        return self.item

    def _snapshot_restorer(self):
        snapshot = self.item

        def restore() -> None:
            self.item = snapshot

        return restore

    def _optimistic_vote(self, vote_type, service) -> MutationResult:
        vote = resolve_vote(self._require_item().user_vote, vote_type)

        def apply(_response) -> None:
            self.item = apply_vote(self.item, vote)

        def reconcile(response) -> None:
            update = vote_counts(response)
            if update:
                self.item = self.item.model_copy(update=update)

        return self.updater.run(Mutation(
            key=f"{self.key}:vote",
            request=lambda: service.vote(self.item_id, vote),
            apply=apply,
            compensate=self._snapshot_restorer(),
            reconcile=reconcile,
            optimistic=True,
            error_title="Failed to vote",
        ))

    def _optimistic_save(self, request) -> MutationResult:
        self._require_item()

        def apply(_response) -> None:
            self.item = self.item.model_copy(update={"has_saved": not self.item.has_saved})

        def reconcile(response) -> None:
            saved = saved_flag(response)
            if saved is not None:
                self.item = self.item.model_copy(update={"has_saved": saved})

        return self.updater.run(Mutation(
            key=f"{self.key}:save",
            request=request,
            apply=apply,
            compensate=self._snapshot_restorer(),
            reconcile=reconcile,
            optimistic=True,
            error_title=f"Failed to save {self.kind}",
        ))


class QuestionDetail(_DetailPage):
    """A question with its answers."""

    kind = "question"

    def __init__(self, api: AspirantAPI, updater: OptimisticUpdater, item_id: str):
        super().__init__(api, updater, item_id)
        self.answers: List[Answer] = []

    @property
    def question(self) -> Optional[Question]:
        return self.item

    def _fetch(self) -> Dict[str, Any]:
        return self.api.questions.get(self.item_id)

    def _parse(self, body: Dict[str, Any]) -> Question:
        data = dict(body.get("question", body))
        if "userVote" in body:
            data["userVote"] = body["userVote"]
        if "hasSaved" in body:
            data["hasSaved"] = body["hasSaved"]
        return Question.model_validate(data)

    def load_answers(self, sort_by: Optional[str] = None) -> bool:
        try:
            payload = self.api.answers.for_question(self.item_id, sort_by=sort_by)
        except APIError as e:
            logger.error(f"Error fetching answers for {self.key}: {e.message}")
            self.error = e.message
            return False
        items = as_list(payload, "answers") or as_list(payload, "data")
        try:
            self.answers = [Answer.model_validate(item) for item in items]
        except PydanticValidationError as e:
            logger.error(f"Unexpected answers payload for {self.key}: {e.error_count()} validation errors")
            self.error = UNEXPECTED_RESPONSE
            return False
        return True

    def vote(self, vote_type) -> MutationResult:
        """Vote on the question, then reload it for the authoritative counts."""
        result = self._optimistic_vote(vote_type, self.api.questions)
        if result.ok and not result.stale:
            self.load()
        return result

    def toggle_save(self) -> MutationResult:
        return self._optimistic_save(lambda: self.api.questions.toggle_save(self.item_id))

    def mark_solved(self, answer_id: Optional[str] = None) -> MutationResult:
        self._require_item()

        def apply(_response) -> None:
            self.item = self.item.model_copy(update={
                "is_solved": True,
                "solved_at": datetime.now(timezone.utc),
            })
            if answer_id:
                self.answers = [
                    a.model_copy(update={"is_accepted": True}) if a.id == answer_id else a
                    for a in self.answers
                ]

        return self.updater.run(Mutation(
            key=f"{self.key}:solve",
            request=lambda: self.api.questions.mark_solved(self.item_id, answer_id),
            apply=apply,
            error_title="Failed to mark as solved",
        ))

    def vote_answer(self, answer_id: str, vote_type) -> MutationResult:
        """Vote on one answer, then reload the answer list."""
        answer = next((a for a in self.answers if a.id == answer_id), None)
        if answer is None:
            raise KeyError(f"Answer {answer_id} is not loaded")
        vote = resolve_vote(answer.user_vote, vote_type)

        def apply(_response) -> None:
            self.answers = [apply_vote(a, vote) if a.id == answer_id else a for a in self.answers]

        def compensate() -> None:
            self.answers = [answer if a.id == answer_id else a for a in self.answers]

        def reconcile(response) -> None:
            update = vote_counts(response)
            if update:
                self.answers = [a.model_copy(update=update) if a.id == answer_id else a for a in self.answers]

        result = self.updater.run(Mutation(
            key=f"answer:{answer_id}:vote",
            request=lambda: self.api.answers.vote(answer_id, vote),
            apply=apply,
            compensate=compensate,
            reconcile=reconcile,
            optimistic=True,
            error_title="Failed to vote",
        ))
        if result.ok and not result.stale:
            self.load_answers()
        return result


class ResourceDetail(_DetailPage):
    """A shared study resource."""

    kind = "resource"

    @property
    def resource(self) -> Optional[Resource]:
        return self.item

    def _fetch(self) -> Dict[str, Any]:
        return self.api.resources.get(self.item_id)

    def _parse(self, body: Dict[str, Any]) -> Resource:
        data = dict(body.get("resource", body))
        if "userRating" in body:
            data["userRating"] = body["userRating"]
        if "hasSaved" in body:
            data["hasSaved"] = body["hasSaved"]
        return Resource.model_validate(data)

    def rate(self, rating: int) -> MutationResult:
        """Rate 1-5 once the server accepts it, then refresh the aggregate."""
        resource = self._require_item()
        if not 1 <= int(rating) <= 5:
            raise ValueError("Rating must be between 1 and 5")
        previous = resource.user_rating

        def apply(response) -> None:
            self.item = self.item.model_copy(update={
                "user_rating": int(rating),
                "rating": apply_rating(self.item.rating, int(rating), previous),
            })
            self.load()

        return self.updater.run(Mutation(
            key=f"{self.key}:rate",
            request=lambda: self.api.resources.rate(self.item_id, int(rating)),
            apply=apply,
            error_title="Failed to rate resource",
        ))

    def toggle_save(self) -> MutationResult:
        return self._optimistic_save(lambda: self.api.resources.toggle_save(self.item_id))

    def record_download(self) -> None:
        """Bump the download counter; failures are logged only."""
        try:
            self.api.resources.record_download(self.item_id)
        except APIError as e:
            logger.warning(f"Error recording download for {self.key}: {e.message}")
            return
        if self.item is not None:
            self.item = self.item.model_copy(update={"downloads": self.item.downloads + 1})


class StoryDetail(_DetailPage):
    """A success/journey story."""

    kind = "story"

    @property
    def story(self) -> Optional[Story]:
        return self.item

    def _fetch(self) -> Dict[str, Any]:
        return self.api.stories.get(self.item_id)

    def _parse(self, body: Dict[str, Any]) -> Story:
        data = dict(body.get("story", body))
        if "userVote" in body:
            data["userVote"] = body["userVote"]
        if "hasSaved" in body:
            data["hasSaved"] = body["hasSaved"]
        return Story.model_validate(data)

    def vote(self, vote_type) -> MutationResult:
        return self._optimistic_vote(vote_type, self.api.stories)

    def toggle_save(self) -> MutationResult:
        return self._optimistic_save(lambda: self.api.stories.toggle_save(self.item_id))
