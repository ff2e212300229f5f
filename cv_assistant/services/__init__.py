"""Service layer exports."""

from .chat import ChatAssistantService
from .contact_messages import ContactMessageService, parse_contact_message
from .profiles import ProfileResult, ProfileService
from .token_cache import CachedToken, TokenCache

__all__ = [
    "CachedToken",
    "ChatAssistantService",
    "ContactMessageService",
    "ProfileResult",
    "ProfileService",
    "TokenCache",
    "parse_contact_message",
]
