"""Core app configuration, database, errors and security."""

from taskboard.core.config import get_settings, settings
from taskboard.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
