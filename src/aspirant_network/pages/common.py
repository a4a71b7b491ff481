"""Helpers shared by the page state objects."""

from typing import Any, Dict, List, Optional, TypeVar

from ..models import ResourceRating, VoteType, WireModel

M = TypeVar("M", bound=WireModel)

UPVOTE = VoteType.UP.value
DOWNVOTE = VoteType.DOWN.value

UNEXPECTED_RESPONSE = "Received an unexpected response from the server"


def unwrap(payload: Any, key: Optional[str] = None) -> Any:
    """
    Strip the ``{success, data}`` envelope, then optionally pick ``key``.

    Detail endpoints answer either ``{data: {question, userVote}}`` or
    ``{question, userVote}``; both unwrap to the inner mapping.
    """
    body = payload
    if isinstance(body, dict) and "data" in body:
        body = body["data"]
    if key is not None and isinstance(body, dict) and key in body:
        return body[key]
    return body


def as_list(payload: Any, key: str) -> List[Dict[str, Any]]:
    body = unwrap(payload, key)
    if isinstance(body, list):
        return body
    return []


def resolve_vote(current: Optional[str], vote_type) -> VoteType:
    """Pressing the vote the user already holds takes it back."""
    vote = VoteType(vote_type)
    if vote is not VoteType.REMOVE and current == vote.value:
        return VoteType.REMOVE
    return vote


def apply_vote(item: M, vote_type) -> M:
    """
    Return a copy of ``item`` with a vote applied the way the server does it.

    Any previous vote is withdrawn first, so a user holds at most one vote per
    item and repeating the same vote changes nothing. Counts never drop below 0.
    """
    vote = VoteType(vote_type)
    current = getattr(item, "user_vote", None)
    upvotes, downvotes = item.upvotes, item.downvotes

    if current == UPVOTE:
        upvotes = max(0, upvotes - 1)
    elif current == DOWNVOTE:
        downvotes = max(0, downvotes - 1)

    new_vote = None
    if vote is VoteType.UP:
        upvotes, new_vote = upvotes + 1, UPVOTE
    elif vote is VoteType.DOWN:
        downvotes, new_vote = downvotes + 1, DOWNVOTE

    return item.model_copy(update={"upvotes": upvotes, "downvotes": downvotes, "user_vote": new_vote})


def vote_counts(payload: Any) -> Dict[str, Any]:
    """Extract vote counts and ``userVote`` from a vote response, if present."""
    body = unwrap(payload)
    if not isinstance(body, dict):
        return {}
    update: Dict[str, Any] = {}
    for field, keys in (("upvotes", ("upvoteCount", "upvotes")), ("downvotes", ("downvoteCount", "downvotes"))):
        value = next((body[k] for k in keys if isinstance(body.get(k), int)), None)
        if value is not None:
            update[field] = value
    if "userVote" in body:
        update["user_vote"] = body["userVote"]
    return update


def saved_flag(payload: Any) -> Optional[bool]:
    body = unwrap(payload)
    if isinstance(body, dict):
        for key in ("saved", "hasSaved"):
            if isinstance(body.get(key), bool):
                return body[key]
    return None


def apply_rating(rating: ResourceRating, new_value: int, previous: Optional[int]) -> ResourceRating:
    """Fold one user's rating into the aggregate; re-rating replaces the old value."""
    total, count = rating.total, rating.count
    if previous is not None:
        total = total - previous + new_value
    else:
        total += new_value
        count += 1
    average = total / count if count else 0.0
    return ResourceRating(average=average, total=total, count=count)
