"""
Exam selection derived from the auth session.

A user prepares for a primary exam and optionally a secondary one; the
current exam decides which content the feed shows.
"""

from typing import List, Optional

from loguru import logger

from ..errors import ExamSelectionError, StorageError
from ..models import UserSummary
from ..storage import CURRENT_EXAM_KEY, KeyValueStore
from .auth import AuthSession


class ExamSession:
    """
    Holds ``current_exam`` for the signed-in user.

    The selection is recomputed whenever the auth session reports a user
    change, and only once the auth session has finished hydrating.
    """

    def __init__(self, auth: AuthSession, store: Optional[KeyValueStore] = None):
        self.auth = auth
        self.store = store or auth.store
        self.current_exam: Optional[str] = None
        self.loading = True
        self._unsubscribe = auth.subscribe(self._on_user_changed)
        self.refresh()

    def close(self) -> None:
        """Stop following the auth session."""
        self._unsubscribe()

    def _on_user_changed(self, _user: Optional[UserSummary]) -> None:
        self.refresh()

    def refresh(self) -> Optional[str]:
        """
        Recompute the current exam from the user and the stored preference.

        A stored exam is honoured only when it equals the user's secondary
        exam; anything else falls back to the primary exam, which is then
        persisted.
        """
        if self.auth.loading:
            return self.current_exam

        user = self.auth.user
        if user and user.primary_exam:
            stored_exam = self.store.get_item(CURRENT_EXAM_KEY)
            if stored_exam and user.secondary_exam and stored_exam == user.secondary_exam:
                self.current_exam = user.secondary_exam
            else:
                self.current_exam = user.primary_exam
                self._persist(user.primary_exam)
        else:
            self.current_exam = None

        self.loading = False
        return self.current_exam

    def switch_exam(self, exam: str) -> str:
        """
        Switch to the user's primary or secondary exam.

        Raises:
            ExamSelectionError: If nobody is signed in, or the exam is not one
                of the user's configured exams
        """
        user = self.auth.user
        if user is None:
            raise ExamSelectionError("User must be authenticated to switch exams")

        if exam != user.primary_exam and exam != user.secondary_exam:
            raise ExamSelectionError("Invalid exam selection. Must be primary or secondary exam.")

        if exam == user.secondary_exam and not user.secondary_exam:
            raise ExamSelectionError("User does not have a secondary exam configured")

        self.current_exam = exam
        self._persist(exam)
        logger.info(f"Switched current exam to {exam}")
        return exam

    def get_available_exams(self) -> List[str]:
        user = self.auth.user
        if user is None:
            return []
        exams = [user.primary_exam] if user.primary_exam else []
        if user.secondary_exam:
            exams.append(user.secondary_exam)
        return exams

    def can_switch_exam(self) -> bool:
        user = self.auth.user
        return bool(user and user.secondary_exam)

    def is_active_exam(self, exam: str) -> bool:
        return self.current_exam == exam

    def _persist(self, exam: str) -> None:
        try:
            self.store.set_item(CURRENT_EXAM_KEY, exam)
        except StorageError as e:
            logger.warning(f"Could not persist current exam '{exam}': {e}")
