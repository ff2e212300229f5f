"""Expose constructed client wrappers."""

from .chat_completions import ChatCompletionsClient
from .fallback_profiles import FallbackProfileStore
from .intra_api import IntraApiClient
from .intra_auth import IntraOAuthClient, TokenGrant
from .message_store import ContactMessageStore

__all__ = [
    "ChatCompletionsClient",
    "ContactMessageStore",
    "FallbackProfileStore",
    "IntraApiClient",
    "IntraOAuthClient",
    "TokenGrant",
]
