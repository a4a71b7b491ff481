"""API client module for the Aspirant Network backend."""

from ..errors import APIError
from .client import AspirantAPIClient
from .services import (
    ActivityService,
    AnswerService,
    AspirantAPI,
    AuthService,
    QuestionService,
    ResourceService,
    SearchService,
    StoryService,
    SubjectService,
    TopicService,
    UserService,
)

__all__ = [
    "APIError",
    "ActivityService",
    "AnswerService",
    "AspirantAPI",
    "AspirantAPIClient",
    "AuthService",
    "QuestionService",
    "ResourceService",
    "SearchService",
    "StoryService",
    "SubjectService",
    "TopicService",
    "UserService",
]
