"""
Service wrappers for each group of backend endpoints.

Every method returns the decoded JSON payload; most list endpoints answer
``{success, data, pagination?}`` and mutations ``{success, data}`` or
``{success, message}``.
"""

from typing import Any, Dict, Optional

from ..models import VoteType
from .client import AspirantAPIClient


def _page_params(page: int = 1, limit: int = 20, **filters: Any) -> Dict[str, Any]:
    params: Dict[str, Any] = {"page": page, "limit": limit}
    params.update({k: v for k, v in filters.items() if v is not None})
    return params


def _vote_body(vote_type) -> Dict[str, str]:
    return {"voteType": VoteType(vote_type).value}


class AuthService:
    """Sign-in, sign-up and password recovery."""

    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """Returns ``{token, user}``."""
        return self.client.post("auth/login", {"email": email, "password": password})

    def signup(self, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Returns ``{token, user}``."""
        return self.client.post("auth/signup", user_data)

    def send_otp(self, email: str) -> Dict[str, Any]:
        return self.client.post("auth/send-otp", {"email": email})

    def verify_otp(self, email: str, otp: str) -> Dict[str, Any]:
        return self.client.post("auth/verify-otp", {"email": email, "otp": otp})

    def forgot_password(self, email: str) -> Dict[str, Any]:
        return self.client.post("auth/forgot-password", {"email": email})

    def reset_password(self, token: str, new_password: str) -> Dict[str, Any]:
        return self.client.post("auth/reset-password", {"token": token, "newPassword": new_password})

    def get_me(self) -> Dict[str, Any]:
        return self.client.get("auth/me")

    def logout(self) -> Dict[str, Any]:
        return self.client.post("auth/logout")


class QuestionService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def list(self, page: int = 1, limit: int = 20, **filters: Any) -> Dict[str, Any]:
        """Filters: exam, subject, topic, difficulty, sortBy, search, createdBy, solved."""
        return self.client.get("questions", _page_params(page, limit, **filters))

    def trending(self, limit: int = 10) -> Dict[str, Any]:
        return self.client.get("questions/trending", {"limit": limit})

    def unanswered(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("questions/unanswered", _page_params(page, limit))

    def get(self, question_id: str) -> Dict[str, Any]:
        """Returns ``{question, userVote, hasSaved}`` (possibly under ``data``)."""
        return self.client.get(f"questions/{question_id}")

    def create(self, question_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.post("questions", question_data)

    def update(self, question_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.patch(f"questions/{question_id}", update_data)

    def delete(self, question_id: str) -> Dict[str, Any]:
        return self.client.delete(f"questions/{question_id}")

    def vote(self, question_id: str, vote_type) -> Dict[str, Any]:
        return self.client.patch(f"questions/{question_id}/vote", _vote_body(vote_type))

    def toggle_save(self, question_id: str) -> Dict[str, Any]:
        return self.client.post(f"questions/{question_id}/save")

    def mark_solved(self, question_id: str, answer_id: Optional[str] = None) -> Dict[str, Any]:
        """Toggles the solved flag; ``answer_id`` marks the accepted answer."""
        body = {"answerId": answer_id} if answer_id else None
        return self.client.patch(f"questions/{question_id}/solve", body)

    def by_user(self, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get(f"questions/user/{user_id}", _page_params(page, limit))

    def by_subject(self, subject_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get(f"questions/subject/{subject_id}", _page_params(page, limit))

    def by_topic(self, topic_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get(f"questions/topic/{topic_id}", _page_params(page, limit))


class AnswerService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def list(self, page: int = 1, limit: int = 20, **filters: Any) -> Dict[str, Any]:
        """Filters: author."""
        return self.client.get("answers", _page_params(page, limit, **filters))

    def for_question(self, question_id: str, page: int = 1, limit: int = 20, sort_by: Optional[str] = None) -> Dict[str, Any]:
        return self.client.get(f"questions/{question_id}/answers", _page_params(page, limit, sortBy=sort_by))

    def create(self, question_id: str, content: str, is_anonymous: bool = False) -> Dict[str, Any]:
        return self.client.post(f"questions/{question_id}/answers", {
            "content": content,
            "isAnonymous": is_anonymous,
        })

    def get(self, answer_id: str) -> Dict[str, Any]:
        return self.client.get(f"answers/{answer_id}")

    def update(self, answer_id: str, content: str) -> Dict[str, Any]:
        return self.client.patch(f"answers/{answer_id}", {"content": content})

    def delete(self, answer_id: str) -> Dict[str, Any]:
        return self.client.delete(f"answers/{answer_id}")

    def vote(self, answer_id: str, vote_type) -> Dict[str, Any]:
        return self.client.patch(f"answers/{answer_id}/vote", _vote_body(vote_type))

    def accept(self, answer_id: str) -> Dict[str, Any]:
        return self.client.patch(f"answers/{answer_id}/accept")

    def unaccept(self, answer_id: str) -> Dict[str, Any]:
        return self.client.patch(f"answers/{answer_id}/unaccept")

    def add_comment(self, answer_id: str, content: str) -> Dict[str, Any]:
        return self.client.post(f"answers/{answer_id}/comments", {"content": content})

    def delete_comment(self, answer_id: str, comment_id: str) -> Dict[str, Any]:
        return self.client.delete(f"answers/{answer_id}/comments/{comment_id}")

    def by_user(self, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get(f"answers/user/{user_id}", _page_params(page, limit))


class ResourceService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def list(self, page: int = 1, limit: int = 20, **filters: Any) -> Dict[str, Any]:
        """Filters: exam, type, subject, sortBy, search, uploadedBy."""
        return self.client.get("resources", _page_params(page, limit, **filters))

    def top_rated(self, limit: int = 10) -> Dict[str, Any]:
        return self.client.get("resources/top-rated", {"limit": limit})

    def most_saved(self, limit: int = 10) -> Dict[str, Any]:
        return self.client.get("resources/most-saved", {"limit": limit})

    def verified(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("resources/verified", _page_params(page, limit))

    def saved(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("resources/saved", _page_params(page, limit))

    def get(self, resource_id: str) -> Dict[str, Any]:
        """Returns ``{resource, userRating, hasSaved}`` (possibly under ``data``)."""
        return self.client.get(f"resources/{resource_id}")

    def create(self, resource_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.post("resources", resource_data)

    def update(self, resource_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.patch(f"resources/{resource_id}", update_data)

    def delete(self, resource_id: str) -> Dict[str, Any]:
        return self.client.delete(f"resources/{resource_id}")

    def rate(self, resource_id: str, rating: int) -> Dict[str, Any]:
        if not 1 <= int(rating) <= 5:
            raise ValueError("Rating must be between 1 and 5")
        return self.client.patch(f"resources/{resource_id}/rate", {"rating": int(rating)})

    def toggle_save(self, resource_id: str) -> Dict[str, Any]:
        return self.client.post(f"resources/{resource_id}/save")

    def record_download(self, resource_id: str) -> Dict[str, Any]:
        return self.client.patch(f"resources/{resource_id}/download")

    def by_user(self, user_id: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get(f"resources/user/{user_id}", _page_params(page, limit))


class StoryService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def list(self, page: int = 1, limit: int = 20, **filters: Any) -> Dict[str, Any]:
        """Filters: exam, storyType, sortBy, search."""
        return self.client.get("stories", _page_params(page, limit, **filters))

    def get(self, story_id: str) -> Dict[str, Any]:
        return self.client.get(f"stories/{story_id}")

    def create(self, story_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.post("stories", story_data)

    def update(self, story_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.patch(f"stories/{story_id}", update_data)

    def delete(self, story_id: str) -> Dict[str, Any]:
        return self.client.delete(f"stories/{story_id}")

    def vote(self, story_id: str, vote_type) -> Dict[str, Any]:
        return self.client.patch(f"stories/{story_id}/vote", _vote_body(vote_type))

    def toggle_save(self, story_id: str) -> Dict[str, Any]:
        return self.client.post(f"stories/{story_id}/save")


class ActivityService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def list(self, page: int = 1, limit: int = 20, unread_only: bool = False) -> Dict[str, Any]:
        """Returns ``{data: [...], unreadCount}``."""
        params = _page_params(page, limit, unreadOnly=str(unread_only).lower())
        return self.client.get("activities", params)

    def mark_read(self, activity_id: str) -> Dict[str, Any]:
        return self.client.patch(f"activities/{activity_id}/read")

    def mark_all_read(self) -> Dict[str, Any]:
        return self.client.patch("activities/read-all")


class UserService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def me(self) -> Dict[str, Any]:
        return self.client.get("users/me")

    def update_me(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.patch("users/me", updates)

    def update_settings(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Returns ``{user}`` with the saved profile."""
        return self.client.patch("users/settings", updates)

    def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        return self.client.patch("users/me/password", {
            "currentPassword": current_password,
            "newPassword": new_password,
        })

    def change_primary_exam(self, primary_exam: str) -> Dict[str, Any]:
        return self.client.patch("users/change-exam", {"primaryExam": primary_exam})

    def my_activity(self, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("users/me/activity", _page_params(page, limit))

    def delete_account(self, password: str) -> Dict[str, Any]:
        return self.client.delete("users/me", {"password": password})

    def saved(self, content_type: str = "all") -> Dict[str, Any]:
        """``content_type`` is all, questions, resources or stories."""
        return self.client.get("users/me/saved", {"type": content_type})

    def leaderboard(self, exam: Optional[str] = None, limit: int = 10) -> Dict[str, Any]:
        return self.client.get("users/leaderboard", {"exam": exam, "limit": limit})

    def profile(self, username: str) -> Dict[str, Any]:
        return self.client.get(f"users/{username}")


class SearchService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def search(self, query: str, content_type: Optional[str] = None, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("search", _page_params(page, limit, q=query, type=content_type))

    def questions(self, query: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("search/questions", _page_params(page, limit, q=query))

    def resources(self, query: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self.client.get("search/resources", _page_params(page, limit, q=query))

    def tags(self, query: str) -> Dict[str, Any]:
        return self.client.get("search/tags", {"q": query})

    def autocomplete(self, query: str) -> Dict[str, Any]:
        return self.client.get("search/autocomplete", {"q": query})


class SubjectService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def list(self, exam: Optional[str] = None) -> Dict[str, Any]:
        return self.client.get("subjects", {"exam": exam})

    def get(self, subject_id: str) -> Dict[str, Any]:
        return self.client.get(f"subjects/{subject_id}")

    def topics(self, subject_id: str) -> Dict[str, Any]:
        return self.client.get(f"subjects/{subject_id}/topics")


class TopicService:
    def __init__(self, client: AspirantAPIClient):
        self.client = client

    def get(self, topic_id: str) -> Dict[str, Any]:
        return self.client.get(f"topics/{topic_id}")


class AspirantAPI:
    """All service groups sharing one client."""

    def __init__(self, client: AspirantAPIClient):
        self.client = client
        self.auth = AuthService(client)
        self.questions = QuestionService(client)
        self.answers = AnswerService(client)
        self.resources = ResourceService(client)
        self.stories = StoryService(client)
        self.activities = ActivityService(client)
        self.users = UserService(client)
        self.search = SearchService(client)
        self.subjects = SubjectService(client)
        self.topics = TopicService(client)
