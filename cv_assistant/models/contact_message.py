"""
Domain model for persisted contact messages.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DISPLAY_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ContactMessage(BaseModel):
    """A "contact me" submission as stored in the message table."""

    id: Optional[int] = Field(None, description="Assigned by the store on insert.")
    company: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("company", "contact", "message", mode="before")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        """Naive values are taken as UTC; aware values are converted."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def display_date(self) -> str:
        return self.date.strftime(DISPLAY_DATE_FORMAT)


__all__ = ["ContactMessage", "DISPLAY_DATE_FORMAT"]
