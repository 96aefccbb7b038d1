"""Configuration management."""

from repokit.config.settings import (
    DatabaseSettings,
    RepositorySettings,
    Settings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "RepositorySettings",
    "Settings",
    "get_settings",
]
