"""
Unit tests for the wire models and vote/rating helpers.
"""

import pytest
from pydantic import TypeAdapter

from aspirant_network.models import (
    FeedItem,
    Pagination,
    Question,
    Ref,
    Resource,
    ResourceRating,
    UserSummary,
    VoteType,
    ref_name,
)
from aspirant_network.pages.common import apply_rating, apply_vote, resolve_vote, unwrap


class TestModels:

    def test_user_accepts_either_id_key(self):
        assert UserSummary.model_validate({"_id": "u1"}).id == "u1"
        assert UserSummary.model_validate({"id": "u1"}).id == "u1"

    def test_user_to_wire_uses_backend_names(self):
        user = UserSummary(id="u1", name="Asha", primary_exam="JEE", attempt_year=2027)
        wire = user.to_wire()

        assert wire["_id"] == "u1"
        assert wire["primaryExam"] == "JEE"
        assert wire["attemptYear"] == 2027
        assert "secondaryExam" not in wire

    def test_numeric_ids_become_strings(self):
        assert Question.model_validate({"_id": 42}).id == "42"

    def test_feed_item_discriminator(self):
        adapter = TypeAdapter(FeedItem)
        assert isinstance(adapter.validate_python({"_id": "r1", "postType": "resource"}), Resource)
        assert isinstance(adapter.validate_python({"_id": "q1", "postType": "question"}), Question)

    def test_populated_subject_and_topic(self):
        question = Question.model_validate({
            "_id": "q1",
            "subject": {"_id": "s1", "name": "Physics", "slug": "physics"},
            "topic": "t1",
        })

        assert isinstance(question.subject, Ref)
        assert ref_name(question.subject) == "Physics"
        assert ref_name(question.topic) == "t1"
        assert ref_name(None) is None

    def test_pagination_reads_list_endpoint_keys(self):
        pagination = Pagination.model_validate({
            "currentPage": 2, "totalPages": 3, "totalQuestions": 50, "hasNextPage": True, "hasPrevPage": True,
        })

        assert (pagination.page, pagination.pages, pagination.total) == (2, 3, 50)
        assert pagination.has_next

    def test_pagination_without_next_flag_compares_pages(self):
        assert Pagination.model_validate({"currentPage": 3, "totalPages": 3, "total": 41}).has_next is False
        assert Pagination.model_validate({"currentPage": 1, "totalPages": 2, "totalResults": 30}).has_next

    def test_score(self):
        assert Question(id="q1", upvotes=5, downvotes=2).score == 3


class TestVoteHelpers:

    @pytest.mark.parametrize("current, vote, expected", [
        (None, VoteType.UP, (4, 1, "upvote")),
        ("upvote", VoteType.UP, (3, 1, "upvote")),
        ("downvote", VoteType.UP, (4, 0, "upvote")),
        ("upvote", VoteType.DOWN, (2, 2, "downvote")),
        ("downvote", VoteType.REMOVE, (3, 0, None)),
    ])
    def test_apply_vote(self, current, vote, expected):
        item = Question(id="q1", upvotes=3, downvotes=1, user_vote=current)
        voted = apply_vote(item, vote)
        assert (voted.upvotes, voted.downvotes, voted.user_vote) == expected

    def test_counts_never_negative(self):
        item = Question(id="q1", upvotes=0, downvotes=0, user_vote="upvote")
        assert apply_vote(item, "remove").upvotes == 0

    def test_resolve_vote(self):
        assert resolve_vote(None, "upvote") is VoteType.UP
        assert resolve_vote("upvote", "upvote") is VoteType.REMOVE
        assert resolve_vote("upvote", "downvote") is VoteType.DOWN
        with pytest.raises(ValueError):
            resolve_vote(None, "up")

    def test_apply_rating(self):
        rating = ResourceRating(average=0, total=0, count=0)
        rating = apply_rating(rating, 4, None)
        assert (rating.total, rating.count, rating.average) == (4, 1, 4.0)

        rating = apply_rating(rating, 2, 4)
        assert (rating.total, rating.count, rating.average) == (2, 1, 2.0)

    def test_unwrap(self):
        assert unwrap({"success": True, "data": {"question": {"_id": "q1"}}}, "question") == {"_id": "q1"}
        assert unwrap({"question": {"_id": "q1"}}, "question") == {"_id": "q1"}
        assert unwrap({"data": [1, 2]}, "questions") == [1, 2]
