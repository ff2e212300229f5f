"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from functools import lru_cache

from cv_assistant.clients import (
    ChatCompletionsClient,
    ContactMessageStore,
    FallbackProfileStore,
    IntraApiClient,
    IntraOAuthClient,
)
from cv_assistant.core.config import get_settings
from cv_assistant.core.errors import MisconfigurationError
from cv_assistant.services import (
    ChatAssistantService,
    ContactMessageService,
    ProfileService,
    TokenCache,
)
from cv_assistant.services.chat import load_resume


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_chat_client() -> ChatCompletionsClient:
    """Provide the chat-completions client."""
    return ChatCompletionsClient(_settings().chat)


@lru_cache()
def _resume_text() -> str:
    settings = _settings()
    try:
        return load_resume(settings.storage.resume_path)
    except OSError as exc:
        raise MisconfigurationError("RESUME_PATH") from exc


def get_chat_assistant_service() -> ChatAssistantService:
    """Build the résumé chat service."""
    settings = _settings()
    return ChatAssistantService(
        get_chat_client(),
        resume=_resume_text(),
        max_question_chars=settings.chat.max_question_chars,
    )


@lru_cache()
def get_message_store() -> ContactMessageStore:
    """Provide shared SQLite contact message store."""
    return ContactMessageStore(_settings().storage.database_path)


def get_contact_message_service() -> ContactMessageService:
    """Build the contact message service."""
    return ContactMessageService(
        get_message_store(),
        admin_password=_settings().admin.password,
    )


@lru_cache()
def get_token_cache() -> TokenCache:
    """Provide the process-wide bearer token cache."""
    return TokenCache(margin_seconds=_settings().intra.token_margin_seconds)


@lru_cache()
def get_intra_oauth_client() -> IntraOAuthClient:
    """Provide the 42 OAuth client."""
    return IntraOAuthClient(_settings().intra)


@lru_cache()
def get_intra_api_client() -> IntraApiClient:
    """Provide the 42 API client."""
    return IntraApiClient(_settings().intra)


@lru_cache()
def get_fallback_profile_store() -> FallbackProfileStore:
    """Provide the local fallback profile directory."""
    return FallbackProfileStore(_settings().intra.fallback_dir)


def get_profile_service() -> ProfileService:
    """Build the profile service around the shared token cache."""
    return ProfileService(
        oauth_client=get_intra_oauth_client(),
        api_client=get_intra_api_client(),
        token_cache=get_token_cache(),
        fallback_store=get_fallback_profile_store(),
    )


__all__ = [
    "get_chat_assistant_service",
    "get_chat_client",
    "get_contact_message_service",
    "get_fallback_profile_store",
    "get_intra_api_client",
    "get_intra_oauth_client",
    "get_message_store",
    "get_profile_service",
    "get_token_cache",
]
