"""
Optimistic local-state updates with request fencing.

Page actions (vote, save, rate, mark-read, ...) are expressed as Mutation
commands. The updater sends the request, applies the local change, and
discards responses that a newer completed request for the same resource has
already superseded.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from loguru import logger

from ..errors import APIError
from ..notifications import ToastQueue


class RequestFence:
    """
    Per-key monotonic sequence numbers.

    ``begin`` hands out a ticket; ``complete`` accepts a ticket only if no
    newer ticket for the same key has completed before it.
    """

    def __init__(self):
        self._issued: Dict[str, int] = {}
        self._completed: Dict[str, int] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        with self._lock:
            ticket = self._issued.get(key, 0) + 1
            self._issued[key] = ticket
            return ticket

    def complete(self, key: str, ticket: int) -> bool:
        """Record completion; False means the response is stale."""
        with self._lock:
            if ticket <= self._completed.get(key, 0):
                return False
            self._completed[key] = ticket
            return True

    def is_latest(self, key: str, ticket: int) -> bool:
        """True if no newer request for ``key`` has been issued at all."""
        with self._lock:
            return ticket == self._issued.get(key, 0)

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._issued.clear()
                self._completed.clear()
            else:
                self._issued.pop(key, None)
                self._completed.pop(key, None)


@dataclass
class Mutation:
    """
    A local-state change backed by one API request.

    Attributes:
        key: Resource the request targets, e.g. ``question:42``
        request: Sends the request and returns the decoded response
        apply: Applies the change locally; receives the response, or None
            when run optimistically before the request
        compensate: Reverts an optimistic ``apply`` after a failure
        reconcile: Folds the server response into state after an optimistic
            ``apply`` succeeded, e.g. authoritative vote counts
        refetch: Restores ground truth from the server after a failure when
            no compensating action exists
        optimistic: Apply before the request instead of after it
        error_title: Toast title shown on failure
    """

    key: str
    request: Callable[[], Any]
    apply: Callable[[Any], None]
    compensate: Optional[Callable[[], None]] = None
    reconcile: Optional[Callable[[Any], None]] = None
    refetch: Optional[Callable[[], None]] = None
    optimistic: bool = False
    error_title: str = "Something went wrong"


@dataclass
class MutationResult:
    ok: bool
    applied: bool = False
    stale: bool = False
    response: Any = None
    error: Optional[APIError] = field(default=None)


class OptimisticUpdater:
    """Runs Mutations against a shared fence and reports failures as toasts."""

    def __init__(self, fence: Optional[RequestFence] = None, toasts: Optional[ToastQueue] = None):
        self.fence = fence or RequestFence()
        self.toasts = toasts

    def run(self, mutation: Mutation) -> MutationResult:
        ticket = self.fence.begin(mutation.key)

        if mutation.optimistic:
            mutation.apply(None)

        try:
            response = mutation.request()
        except APIError as e:
            logger.error(f"{mutation.error_title} ({mutation.key}): {e.message}")
            if mutation.optimistic:
                self._restore(mutation)
            if self.toasts is not None:
                self.toasts.error(mutation.error_title, e.message)
            return MutationResult(ok=False, error=e)

        if not self.fence.complete(mutation.key, ticket):
            logger.debug(f"Discarding stale response for {mutation.key} (ticket {ticket})")
            return MutationResult(ok=True, applied=mutation.optimistic, stale=True, response=response)

        if not mutation.optimistic:
            mutation.apply(response)
        elif mutation.reconcile is not None:
            mutation.reconcile(response)
        return MutationResult(ok=True, applied=True, response=response)

    def _restore(self, mutation: Mutation) -> None:
        if mutation.compensate is not None:
            mutation.compensate()
        elif mutation.refetch is not None:
            try:
                mutation.refetch()
            except APIError as e:
                logger.error(f"Refetch after failed {mutation.key} also failed: {e.message}")
        else:
            logger.warning(f"No compensating action for {mutation.key}; local state may be out of sync")
