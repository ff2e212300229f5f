"""
Pydantic models for contact message submission and the admin listing.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from cv_assistant.models.contact_message import ContactMessage


class SendMessageRequest(BaseModel):
    """Free-text contact request, e.g. "Company: X, Contact: Y, Message: Z"."""

    user_message: str = Field(..., description="Contact request text to parse.")


class SendMessageResult(BaseModel):
    """Outcome of a contact message submission."""

    reply: str
    id: Optional[int] = None
    error: Optional[str] = None
    missing_fields: List[str] = Field(default_factory=list)


class ContactMessageView(BaseModel):
    """A stored message as shown to the admin."""

    id: int
    company: str
    contact: str
    message: str
    date: str = Field(..., description="UTC timestamp formatted as YYYY-MM-DD HH:MM:SS.")

    @classmethod
    def from_model(cls, record: ContactMessage) -> "ContactMessageView":
        return cls(
            id=record.id,
            company=record.company,
            contact=record.contact,
            message=record.message,
            date=record.display_date(),
        )


__all__ = [
    "ContactMessageView",
    "SendMessageRequest",
    "SendMessageResult",
]
