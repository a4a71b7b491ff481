"""
Key/value stores backing the client session.

Values are always strings, mirroring browser local storage: structured values
(the user profile) are JSON-serialised by the caller.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from ..errors import StorageError

TOKEN_KEY = "token"
USER_KEY = "user"
CURRENT_EXAM_KEY = "currentExam"
# Written by the old standalone onboarding flow; only ever removed now.
LEGACY_ONBOARDING_KEY = "aspirant-user"


class KeyValueStore(ABC):
    """Abstract string key/value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or None if the key is absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value.

        Raises:
            StorageError: If the value could not be persisted
        """

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Removing a missing key is a no-op."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return all stored keys."""

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)


class MemoryStore(KeyValueStore):
    """
    In-process store.

    Args:
        quota_bytes: Optional cap on the total size of keys and values; a write
            that would exceed it raises StorageError like a full browser store.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Store values must be strings, got {type(value).__name__}")
        if self.quota_bytes is not None:
            pending = dict(self._data)
            pending[key] = value
            used = sum(len(k) + len(v) for k, v in pending.items())
            if used > self.quota_bytes:
                raise StorageError(
                    f"Storage quota exceeded ({used} > {self.quota_bytes} bytes) writing '{key}'"
                )
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class JsonFileStore(KeyValueStore):
    """
    Store persisted as a single JSON object on disk.

    Every write replaces the file atomically through a temporary sibling so an
    interrupted write never leaves a half-written session. A corrupt or
    unreadable file is treated as an empty store.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Session store {self.path} is corrupted, starting empty: {e}")
            return {}
        except OSError as e:
            logger.warning(f"Failed to read session store {self.path}: {e}")
            return {}

        if not isinstance(raw, dict):
            logger.warning(f"Session store {self.path} does not hold an object, starting empty")
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        temp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            temp_path.replace(self.path)
        except OSError as e:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    logger.debug(f"Could not remove temp file {temp_path}")
            raise StorageError(f"Failed to write session store {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Store values must be strings, got {type(value).__name__}")
        pending = dict(self._data)
        pending[key] = value
        self._save(pending)
        self._data = pending

    def remove_item(self, key: str) -> None:
        if key not in self._data:
            return
        pending = dict(self._data)
        del pending[key]
        self._save(pending)
        self._data = pending

    def keys(self) -> List[str]:
        return list(self._data.keys())
