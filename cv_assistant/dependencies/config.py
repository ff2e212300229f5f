"""
FastAPI dependency utilities for injecting configuration.
"""

from fastapi import Depends

from cv_assistant.core.config import AppSettings, IntraSettings, get_settings


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


def get_intra_settings(
    settings: AppSettings = Depends(get_app_settings),
) -> IntraSettings:
    """Narrow the settings to the 42 intranet section."""
    return settings.intra


__all__ = ["get_app_settings", "get_intra_settings"]
