"""Application configuration."""

from src.config.settings import VALID_CATEGORIES, Settings, get_settings

__all__ = ["VALID_CATEGORIES", "Settings", "get_settings"]
