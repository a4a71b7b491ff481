"""Configuration module for the Aspirant Network client."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
