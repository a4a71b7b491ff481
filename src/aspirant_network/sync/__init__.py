"""Optimistic update helpers shared by the page state objects."""

from .optimistic import Mutation, MutationResult, OptimisticUpdater, RequestFence

__all__ = ["Mutation", "MutationResult", "OptimisticUpdater", "RequestFence"]
