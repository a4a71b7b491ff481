"""
Unit tests for request fencing and the optimistic updater.
"""

from unittest.mock import Mock

from aspirant_network.errors import APIError
from aspirant_network.notifications import ToastVariant
from aspirant_network.sync import Mutation, OptimisticUpdater, RequestFence


class TestRequestFence:

    def test_tickets_are_monotonic_per_key(self):
        fence = RequestFence()
        assert fence.begin("a") == 1
        assert fence.begin("a") == 2
        assert fence.begin("b") == 1

    def test_older_response_after_newer_is_stale(self):
        fence = RequestFence()
        first = fence.begin("q1")
        second = fence.begin("q1")

        assert fence.complete("q1", second) is True
        assert fence.complete("q1", first) is False

    def test_in_order_completion_is_accepted(self):
        fence = RequestFence()
        first = fence.begin("q1")
        second = fence.begin("q1")

        assert fence.complete("q1", first) is True
        assert fence.complete("q1", second) is True

    def test_is_latest(self):
        fence = RequestFence()
        first = fence.begin("list")
        assert fence.is_latest("list", first)
        fence.begin("list")
        assert not fence.is_latest("list", first)

    def test_reset(self):
        fence = RequestFence()
        fence.begin("a")
        fence.reset()
        assert fence.begin("a") == 1


class TestOptimisticUpdater:

    def test_confirm_then_apply(self, updater):
        state = {"count": 0}

        def apply(response):
            state["count"] = response["count"]

        result = updater.run(Mutation(key="k", request=lambda: {"count": 5}, apply=apply))

        assert result.ok and result.applied and not result.stale
        assert state["count"] == 5

    def test_failed_request_does_not_apply(self, updater, toasts):
        apply = Mock()
        request = Mock(side_effect=APIError("Server down", 500))

        result = updater.run(Mutation(key="k", request=request, apply=apply, error_title="Failed to vote"))

        assert result.ok is False
        assert result.error.status_code == 500
        apply.assert_not_called()
        toast = toasts.drain()[0]
        assert toast.title == "Failed to vote"
        assert toast.description == "Server down"
        assert toast.variant == ToastVariant.ERROR

    def test_optimistic_failure_compensates(self, updater):
        state = {"saved": False}

        def apply(_response):
            state["saved"] = True

        def compensate():
            state["saved"] = False

        result = updater.run(Mutation(
            key="k",
            request=Mock(side_effect=APIError("nope", 400)),
            apply=apply,
            compensate=compensate,
            optimistic=True,
        ))

        assert result.ok is False
        assert state["saved"] is False

    def test_optimistic_failure_refetches_without_compensation(self, updater):
        refetch = Mock()
        updater.run(Mutation(
            key="k",
            request=Mock(side_effect=APIError("nope", 400)),
            apply=Mock(),
            refetch=refetch,
            optimistic=True,
        ))
        refetch.assert_called_once_with()

    def test_refetch_failure_is_logged_not_raised(self, updater):
        result = updater.run(Mutation(
            key="k",
            request=Mock(side_effect=APIError("nope", 400)),
            apply=Mock(),
            refetch=Mock(side_effect=APIError("still down", 503)),
            optimistic=True,
        ))
        assert result.ok is False
        assert result.error.message == "nope"

    def test_optimistic_success_reconciles(self, updater):
        apply = Mock()
        reconcile = Mock()

        updater.run(Mutation(
            key="k",
            request=lambda: {"upvotes": 3},
            apply=apply,
            reconcile=reconcile,
            optimistic=True,
        ))

        apply.assert_called_once_with(None)
        reconcile.assert_called_once_with({"upvotes": 3})

    def test_stale_response_is_discarded(self):
        fence = RequestFence()
        updater = OptimisticUpdater(fence=fence)
        apply = Mock()

        def slow_request():
            # A newer request for the same key starts and finishes first.
            newer = fence.begin("k")
            fence.complete("k", newer)
            return {"count": 1}

        result = updater.run(Mutation(key="k", request=slow_request, apply=apply))

        assert result.ok and result.stale
        apply.assert_not_called()
