"""Parse free-text contact requests, store them and list them for the admin."""

from __future__ import annotations

import asyncio
import hmac
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from cv_assistant.clients.message_store import ContactMessageStore
from cv_assistant.core.errors import (
    ContactParseError,
    InvalidCredentialError,
    MisconfigurationError,
)
from cv_assistant.models.contact_message import ContactMessage

COMPANY_MARKER = "Company:"
CONTACT_MARKER = "Contact:"
MESSAGE_MARKER = "Message:"
CONTACT_END_MARKER = ", Contact:"
MESSAGE_END_MARKER = ", Message:"


def _find(text: str, marker: str) -> int:
    match = re.search(re.escape(marker), text, re.IGNORECASE)
    return match.start() if match else -1


def extract_between(text: str, start: str, end: str) -> str:
    """Text strictly between the first ``start`` and the first ``end`` marker."""
    start_index = _find(text, start)
    end_index = _find(text, end)
    if start_index == -1 or end_index == -1 or end_index <= start_index:
        return ""
    return text[start_index + len(start):end_index]


def extract_after(text: str, start: str) -> str:
    """Text after the first ``start`` marker up to the end of ``text``."""
    start_index = _find(text, start)
    if start_index == -1:
        return ""
    return text[start_index + len(start):]


@dataclass(frozen=True, slots=True)
class ParsedContactMessage:
    company: str
    contact: str
    message: str

    @property
    def missing_fields(self) -> list[str]:
        return [
            name
            for name, value in (
                ("Company", self.company),
                ("Contact", self.contact),
                ("Message", self.message),
            )
            if not value
        ]


def parse_contact_message(text: str) -> ParsedContactMessage:
    """
    Split "Company: X, Contact: Y, Message: Z" into its three fields.

    Markers are matched case-insensitively. A field whose markers are missing
    or out of order comes back empty.
    """
    return ParsedContactMessage(
        company=extract_between(text, COMPANY_MARKER, CONTACT_END_MARKER).strip(),
        contact=extract_between(text, CONTACT_MARKER, MESSAGE_END_MARKER).strip(),
        message=extract_after(text, MESSAGE_MARKER).strip(),
    )


class ContactMessageService:
    """Persist parsed contact messages and gate the admin listing."""

    def __init__(
        self,
        store: ContactMessageStore,
        *,
        admin_password: Optional[str],
    ) -> None:
        self._store = store
        self._admin_password = admin_password

    async def submit(self, user_message: str) -> ContactMessage:
        parsed = parse_contact_message(user_message)
        missing = parsed.missing_fields
        if missing:
            raise ContactParseError(missing)

        record = ContactMessage(
            company=parsed.company,
            contact=parsed.contact,
            message=parsed.message,
            date=datetime.now(timezone.utc),
        )
        return await asyncio.to_thread(self._store.add, record)

    def check_password(self, supplied_password: Optional[str]) -> None:
        configured = self._admin_password
        if not configured:
            raise MisconfigurationError("ADMIN_PASSWORD")
        supplied = (supplied_password or "").encode("utf-8")
        if not hmac.compare_digest(supplied, configured.encode("utf-8")):
            raise InvalidCredentialError("Invalid password.")

    async def list_messages(self, supplied_password: Optional[str]) -> list[ContactMessage]:
        """All stored messages, newest first, once the password checks out."""
        self.check_password(supplied_password)
        return await asyncio.to_thread(self._store.list_all)


__all__ = [
    "ContactMessageService",
    "ParsedContactMessage",
    "extract_after",
    "extract_between",
    "parse_contact_message",
]
