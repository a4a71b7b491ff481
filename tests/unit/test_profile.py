"""
Unit tests for the profile page state and settings helpers.
"""

import pytest

from aspirant_network.errors import APIError
from aspirant_network.pages import ProfileActivity, change_primary_exam, save_settings


@pytest.fixture
def profile(api, updater, toasts):
    api.questions.list.return_value = {
        "data": [{"_id": "q1", "isSolved": False}, {"_id": "q2", "isSolved": True}],
        "pagination": {"currentPage": 1, "totalPages": 1, "totalQuestions": 2, "hasNextPage": False},
    }
    page = ProfileActivity(api, updater, "u1", toasts)
    page.load("questions")
    return page


class TestProfileActivity:

    def test_load(self, profile, api):
        api.questions.list.assert_called_once_with(createdBy="u1")
        assert [item["_id"] for item in profile.items] == ["q1", "q2"]
        assert profile.counts["questions"] == 2

    def test_unknown_tab(self, profile):
        with pytest.raises(ValueError):
            profile.load("followers")

    def test_delete_removes_item_and_decrements_count(self, profile, api, toasts):
        api.questions.delete.return_value = {"success": True}

        result = profile.delete("q1")

        assert result.ok
        assert [item["_id"] for item in profile.items] == ["q2"]
        assert profile.counts["questions"] == 1
        assert toasts.drain()[0].title == "Deleted successfully"

    def test_delete_failure_keeps_item(self, profile, api, toasts):
        api.questions.delete.side_effect = APIError("Not found", 404)

        profile.delete("q1")

        assert len(profile.items) == 2
        assert profile.counts["questions"] == 2
        assert toasts.drain()[0].title == "Delete failed"

    def test_delete_on_answers_tab(self, profile, api):
        api.answers.list.return_value = {"data": [{"_id": "a1"}]}
        api.answers.delete.return_value = {"success": True}
        profile.load("answers")

        profile.delete("a1")

        api.answers.list.assert_called_once_with(author="u1")
        api.answers.delete.assert_called_once_with("a1")
        assert profile.counts["answers"] == 0

    def test_toggle_solved(self, profile, api):
        api.questions.mark_solved.return_value = {"success": True}

        profile.toggle_solved("q1")
        profile.toggle_solved("q2")

        assert [item["isSolved"] for item in profile.items] == [True, False]

    def test_toggle_solved_only_for_questions(self, profile, api):
        api.resources.list.return_value = {"data": []}
        profile.load("resources")

        with pytest.raises(ValueError):
            profile.toggle_solved("r1")


class TestSettingsHelpers:

    def test_save_settings_updates_session(self, api, logged_in):
        api.users.update_settings.return_value = {"user": {"name": "Asha R", "username": "asha", "primaryExam": "JEE"}}

        save_settings(api, logged_in, {"name": "Asha R"})

        assert logged_in.user.name == "Asha R"
        assert logged_in.user.secondary_exam == "NEET"

    def test_change_primary_exam_moves_current_exam(self, api, logged_in, exam):
        api.users.change_primary_exam.return_value = {"success": True}

        change_primary_exam(api, logged_in, "GATE")

        assert logged_in.user.primary_exam == "GATE"
        assert exam.current_exam == "GATE"
