"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_chat_assistant_service,
    get_chat_client,
    get_contact_message_service,
    get_fallback_profile_store,
    get_intra_api_client,
    get_intra_oauth_client,
    get_message_store,
    get_profile_service,
    get_token_cache,
)
from .config import get_app_settings, get_intra_settings

__all__ = [
    "get_app_settings",
    "get_chat_assistant_service",
    "get_chat_client",
    "get_contact_message_service",
    "get_fallback_profile_store",
    "get_intra_api_client",
    "get_intra_oauth_client",
    "get_intra_settings",
    "get_message_store",
    "get_profile_service",
    "get_token_cache",
]
