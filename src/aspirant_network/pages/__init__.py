"""
Page state objects driven by the UI: feed, detail pages, activities and profile.
"""

from .activity import ActivityFeed
from .detail import QuestionDetail, ResourceDetail, StoryDetail
from .feed import Feed
from .profile import PROFILE_TABS, ProfileActivity, change_primary_exam, save_settings

__all__ = [
    "PROFILE_TABS",
    "ActivityFeed",
    "Feed",
    "ProfileActivity",
    "QuestionDetail",
    "ResourceDetail",
    "StoryDetail",
    "change_primary_exam",
    "save_settings",
]
