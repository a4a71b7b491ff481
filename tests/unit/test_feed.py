"""
Unit tests for the exam-scoped feed.
"""

import pytest

from aspirant_network.errors import APIError
from aspirant_network.models import Question, Resource, Story, VoteType
from aspirant_network.pages import Feed


def question(qid, exam="JEE", **extra):
    return {"_id": qid, "title": f"Question {qid}", "exam": exam, **extra}


@pytest.fixture
def feed(api, exam, updater):
    api.questions.list.return_value = {
        "success": True,
        "data": [question("q1", upvotes=2), question("q2")],
        "pagination": {
            "currentPage": 1, "totalPages": 2, "totalQuestions": 25, "hasNextPage": True, "hasPrevPage": False,
        },
    }
    page = Feed(api, exam, updater)
    page.load()
    return page


class TestFeedLoad:

    def test_load_passes_current_exam(self, feed, api):
        api.questions.list.assert_called_once_with(page=1, limit=20, exam="JEE")
        assert [item.id for item in feed.items] == ["q1", "q2"]
        assert all(isinstance(item, Question) for item in feed.items)
        assert feed.pagination.has_next

    def test_page_size_is_capped(self, api, exam, updater, monkeypatch):
        monkeypatch.setenv("ASPIRANT_MAX_PAGE_SIZE", "50")
        assert Feed(api, exam, updater, page_size=500).page_size == 50

    def test_items_for_other_exams_are_dropped(self, api, exam, updater):
        api.questions.list.return_value = {"data": [question("q1"), question("q2", exam="NEET")]}
        page = Feed(api, exam, updater)
        page.load()

        assert [item.id for item in page.items] == ["q1"]
        assert page.pagination.has_next is False

    def test_response_dropped_when_exam_switches_mid_flight(self, api, exam, updater):
        def respond(**_kwargs):
            exam.switch_exam("NEET")
            return {"data": [question("q1")]}

        api.questions.list.side_effect = respond
        page = Feed(api, exam, updater)

        assert page.load() is False
        assert page.items == []

    def test_newer_load_wins(self, api, exam, updater):
        feed = Feed(api, exam, updater)

        def respond(**_kwargs):
            # A second load starts and finishes before this one returns.
            api.questions.list.side_effect = None
            api.questions.list.return_value = {"data": [question("q9")]}
            feed.load(page=2)
            return {"data": [question("q1")]}

        api.questions.list.side_effect = respond

        assert feed.load(page=1) is False
        assert [item.id for item in feed.items] == ["q9"]

    def test_next_page(self, feed, api):
        api.questions.list.return_value = {
            "data": [question("q3")],
            "pagination": {
                "currentPage": 2, "totalPages": 2, "totalQuestions": 25, "hasNextPage": False, "hasPrevPage": True,
            },
        }

        assert feed.next_page() is True
        assert feed.pagination.page == 2
        assert [item.id for item in feed.items] == ["q3"]
        assert feed.next_page() is False

    def test_load_error(self, feed, api):
        api.questions.list.side_effect = APIError("Server down", 500)

        assert feed.load() is False
        assert feed.error == "Server down"
        assert len(feed.items) == 2

    def test_populated_subject_and_topic(self, api, exam, updater):
        api.questions.list.return_value = {"data": [question(
            "q1",
            subject={"_id": "s1", "name": "Physics", "slug": "physics"},
            topic={"_id": "t1", "name": "Optics", "slug": "optics", "difficulty": "Medium"},
            author={"_id": "u2", "username": "ravi", "credibilityScore": 40},
        )]}
        page = Feed(api, exam, updater)

        assert page.load() is True
        assert page.items[0].subject.name == "Physics"
        assert page.items[0].topic.name == "Optics"

    def test_malformed_payload_sets_error(self, feed, api):
        api.questions.list.return_value = {"data": [question("q5", upvotes="lots")]}

        assert feed.load() is False
        assert feed.error == "Received an unexpected response from the server"
        assert [item.id for item in feed.items] == ["q1", "q2"]

    def test_resources_and_stories_parse_to_their_models(self, api, exam, updater):
        api.resources.list.return_value = {"data": [{"_id": "r1", "title": "Notes", "exam": "JEE"}]}
        api.stories.list.return_value = {"data": {"stories": [{"_id": "s1", "title": "Journey"}]}}

        resources = Feed(api, exam, updater, kind="resources")
        stories = Feed(api, exam, updater, kind="stories")
        resources.load()
        stories.load()

        assert isinstance(resources.items[0], Resource)
        assert isinstance(stories.items[0], Story)

    def test_unknown_kind(self, api, exam, updater):
        with pytest.raises(ValueError):
            Feed(api, exam, updater, kind="polls")


class TestFeedActions:

    def test_vote(self, feed, api):
        api.questions.vote.return_value = {"success": True}

        feed.vote("q1", VoteType.DOWN)

        item = feed.get("q1")
        assert item.downvotes == 1
        assert item.user_vote == "downvote"

    def test_vote_failure_restores_list(self, feed, api):
        api.questions.vote.side_effect = APIError("Server down", 500)

        result = feed.vote("q1", VoteType.UP)

        assert result.ok is False
        assert feed.get("q1").upvotes == 2

    def test_failed_vote_keeps_a_load_that_finished_meanwhile(self, feed, api):
        def fail_after_reload(*_args):
            api.questions.list.return_value = {"data": [question("q3"), question("q2", upvotes=9)]}
            feed.load()
            raise APIError("Server down", 500)

        api.questions.vote.side_effect = fail_after_reload

        result = feed.vote("q1", VoteType.UP)

        assert result.ok is False
        assert [item.id for item in feed.items] == ["q3", "q2"]
        assert feed.get("q2").upvotes == 9

    def test_failed_save_restores_only_that_item(self, feed, api):
        def fail_after_other_change(*_args):
            feed._replace("q2", lambda item: item.model_copy(update={"upvotes": 5}))
            raise APIError("Server down", 500)

        api.questions.toggle_save.side_effect = fail_after_other_change

        feed.toggle_save("q1")

        assert feed.get("q1").has_saved is False
        assert feed.get("q2").upvotes == 5

    def test_resources_cannot_be_voted(self, api, exam, updater):
        with pytest.raises(ValueError):
            Feed(api, exam, updater, kind="resources").vote("r1", VoteType.UP)

    def test_toggle_save_uses_server_flag(self, feed, api):
        api.questions.toggle_save.return_value = {"data": {"saved": False}}

        feed.toggle_save("q2")

        assert feed.get("q2").has_saved is False
        api.questions.toggle_save.assert_called_once_with("q2")

    def test_switching_and_withdrawing_a_vote(self, feed, api):
        api.questions.vote.return_value = {"success": True}

        feed.vote("q1", VoteType.UP)
        feed.vote("q1", VoteType.DOWN)
        assert (feed.get("q1").upvotes, feed.get("q1").downvotes) == (2, 1)

        feed.vote("q1", VoteType.DOWN)

        sent = [c.args[1] for c in api.questions.vote.call_args_list]
        assert sent == [VoteType.UP, VoteType.DOWN, VoteType.REMOVE]
        assert feed.get("q1").user_vote is None
        assert feed.get("q1").downvotes == 0
