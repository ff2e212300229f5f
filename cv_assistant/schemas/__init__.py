"""Public schema exports."""

from .chat import AskRequest, ChatReply
from .errors import ErrorResponse
from .messages import ContactMessageView, SendMessageRequest, SendMessageResult

__all__ = [
    "AskRequest",
    "ChatReply",
    "ContactMessageView",
    "ErrorResponse",
    "SendMessageRequest",
    "SendMessageResult",
]
