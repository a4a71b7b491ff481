"""
Unit tests for ExamSession.
"""

import pytest

from aspirant_network.errors import ExamSelectionError
from aspirant_network.session import AuthSession, ExamSession
from aspirant_network.storage import CURRENT_EXAM_KEY, MemoryStore


@pytest.fixture
def single_exam_user(user_data):
    data = dict(user_data)
    data.pop("secondaryExam")
    return data


class TestExamSelection:
    """Deriving the current exam from the user and the store."""

    def test_defaults_to_primary_and_persists(self, exam, store):
        assert exam.current_exam == "JEE"
        assert exam.loading is False
        assert store.get_item(CURRENT_EXAM_KEY) == "JEE"

    def test_stored_secondary_is_honoured(self, store, user_data):
        store.set_item(CURRENT_EXAM_KEY, "NEET")
        auth = AuthSession(store)
        auth.login(user_data, "token-123")

        assert ExamSession(auth).current_exam == "NEET"

    def test_stored_foreign_exam_falls_back_to_primary(self, store, user_data):
        store.set_item(CURRENT_EXAM_KEY, "UPSC")
        auth = AuthSession(store)
        auth.login(user_data, "token-123")

        exam = ExamSession(auth)
        assert exam.current_exam == "JEE"
        assert store.get_item(CURRENT_EXAM_KEY) == "JEE"

    def test_waits_for_hydration(self, store):
        auth = AuthSession(store)
        exam = ExamSession(auth)
        assert exam.loading is True
        assert exam.current_exam is None

        auth.hydrate()
        assert exam.loading is False
        assert exam.current_exam is None

    def test_follows_logout(self, exam, logged_in):
        logged_in.logout()
        assert exam.current_exam is None
        assert exam.get_available_exams() == []


class TestSwitchExam:
    """Switching between primary and secondary exam."""

    def test_switch_to_secondary(self, exam, store):
        assert exam.switch_exam("NEET") == "NEET"
        assert exam.is_active_exam("NEET")
        assert store.get_item(CURRENT_EXAM_KEY) == "NEET"

    def test_switch_survives_rehydration(self, exam, store):
        exam.switch_exam("NEET")

        auth = AuthSession(store)
        auth.hydrate()
        assert ExamSession(auth).current_exam == "NEET"

    def test_foreign_exam_raises_and_keeps_current(self, exam):
        with pytest.raises(ExamSelectionError) as exc_info:
            exam.switch_exam("CAT")

        assert exc_info.value.message == "Invalid exam selection. Must be primary or secondary exam."
        assert exam.current_exam == "JEE"

    def test_requires_user(self, store):
        auth = AuthSession(store)
        auth.hydrate()

        with pytest.raises(ExamSelectionError) as exc_info:
            ExamSession(auth).switch_exam("JEE")
        assert exc_info.value.message == "User must be authenticated to switch exams"

    def test_single_exam_user(self, store, single_exam_user):
        auth = AuthSession(store)
        auth.login(single_exam_user, "token-123")
        exam = ExamSession(auth)

        assert exam.can_switch_exam() is False
        assert exam.get_available_exams() == ["JEE"]
        with pytest.raises(ExamSelectionError) as exc_info:
            exam.switch_exam("NEET")
        assert exc_info.value.message == "Invalid exam selection. Must be primary or secondary exam."
        assert exam.current_exam == "JEE"

    def test_available_exams(self, exam):
        assert exam.get_available_exams() == ["JEE", "NEET"]
        assert exam.can_switch_exam() is True

    def test_recomputes_after_user_update(self, exam, logged_in):
        exam.switch_exam("NEET")
        logged_in.update_user({"secondaryExam": "GATE"})

        assert exam.current_exam == "JEE"
        assert exam.get_available_exams() == ["JEE", "GATE"]
