"""Toast notifications surfaced to the user after page actions."""

import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional


class ToastVariant(str, Enum):
    DEFAULT = "default"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    title: str
    description: str = ""
    variant: ToastVariant = ToastVariant.DEFAULT
    duration: int = 3000  # milliseconds


class ToastQueue:
    """
    FIFO of pending toasts.

    Producers push from page actions; the UI drains once per render.
    """

    def __init__(self, max_size: int = 20):
        self._items: Deque[Toast] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def push(self, toast: Toast) -> None:
        with self._lock:
            self._items.append(toast)

    def success(self, title: str, description: str = "") -> None:
        self.push(Toast(title, description, ToastVariant.SUCCESS))

    def error(self, title: str, description: str = "") -> None:
        self.push(Toast(title, description, ToastVariant.ERROR))

    def drain(self) -> List[Toast]:
        with self._lock:
            items = list(self._items)
            self._items.clear()
        return items

    def peek(self) -> Optional[Toast]:
        with self._lock:
            return self._items[0] if self._items else None

    def __len__(self) -> int:
        return len(self._items)
