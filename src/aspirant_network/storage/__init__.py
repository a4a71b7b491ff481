"""
Persistent key/value storage for session data.

This module provides the local-storage style adapters the session layer
persists into.
"""

from .store import (
    CURRENT_EXAM_KEY,
    LEGACY_ONBOARDING_KEY,
    TOKEN_KEY,
    USER_KEY,
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
)

__all__ = [
    "CURRENT_EXAM_KEY",
    "LEGACY_ONBOARDING_KEY",
    "TOKEN_KEY",
    "USER_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
]
