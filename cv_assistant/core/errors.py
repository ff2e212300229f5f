"""
Error taxonomy shared by clients, services and the HTTP layer.

Clients raise ``UpstreamError`` subclasses; services raise the local errors.
Routes translate both into typed JSON error envelopes.
"""

from __future__ import annotations

from typing import Sequence


class UpstreamError(Exception):
    """An external API could not produce a usable answer."""

    kind = "upstream_error"


class TransportError(UpstreamError):
    """Network failure or timeout while reaching an external API."""

    kind = "transport_error"


class UpstreamRejection(UpstreamError):
    """An external API answered with a non-2xx status."""

    kind = "upstream_rejection"

    def __init__(self, message: str, *, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BlockedByUpstream(UpstreamRejection):
    """An anti-automation interstitial was served instead of the API response."""

    kind = "blocked_by_upstream"


class MalformedResponse(UpstreamError):
    """The response body was not JSON or lacked an expected field."""

    kind = "malformed_response"


class MisconfigurationError(Exception):
    """A required setting or secret is absent."""

    kind = "misconfigured"

    def __init__(self, setting: str, *, detail: str = "is not configured.") -> None:
        super().__init__(f"{setting} {detail}")
        self.setting = setting


class InvalidCredentialError(Exception):
    """The supplied admin password does not match the configured one."""

    kind = "invalid_password"


class ContactParseError(ValueError):
    """A contact message could not be split into company, contact and message."""

    kind = "parse_error"

    def __init__(self, missing_fields: Sequence[str]) -> None:
        self.missing_fields = list(missing_fields)
        super().__init__(
            "Could not parse the message. Include Company, Contact, and Message, "
            "for example: 'Company: Acme, Contact: Jane Doe, Message: Hello'. "
            f"Missing: {', '.join(self.missing_fields)}."
        )


class MessageStoreUnavailableError(Exception):
    """The contact message database could not be read or written."""

    kind = "store_unavailable"


class QuestionTooLongError(ValueError):
    """A chat question exceeds the configured length limit."""

    kind = "question_too_long"

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(f"Question is {length} characters long; the limit is {limit}.")
        self.length = length
        self.limit = limit


class EmptyQuestionError(ValueError):
    """A chat question is blank once surrounding whitespace is removed."""

    kind = "empty_question"

    def __init__(self) -> None:
        super().__init__("Question is empty.")


class ProfileNotFoundError(LookupError):
    """Neither the remote API nor the local fallback could supply a profile."""

    kind = "ProfileNotFound"

    def __init__(self, login: str) -> None:
        super().__init__(f"No fallback data for '{login}'.")
        self.login = login


class FallbackReadError(Exception):
    """A fallback profile file exists but could not be read."""

    kind = "FallbackError"


__all__ = [
    "BlockedByUpstream",
    "ContactParseError",
    "EmptyQuestionError",
    "FallbackReadError",
    "InvalidCredentialError",
    "MalformedResponse",
    "MessageStoreUnavailableError",
    "MisconfigurationError",
    "ProfileNotFoundError",
    "QuestionTooLongError",
    "TransportError",
    "UpstreamError",
    "UpstreamRejection",
]
