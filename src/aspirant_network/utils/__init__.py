"""Utility helpers for the Aspirant Network client."""

from .logging import setup_logging, get_logger

__all__ = ["setup_logging", "get_logger"]
