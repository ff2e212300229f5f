"""
Pydantic models for the résumé chat endpoint.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class AskRequest(BaseModel):
    """Question sent by a visitor."""

    user_message: str = Field(
        ...,
        min_length=1,
        description="Free-form question about the résumé.",
    )

    @field_validator("user_message")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Question must not be blank.")
        return value


class ChatReply(BaseModel):
    """Assistant reply, or a presentation message when ``error`` is set."""

    reply: str
    error: Optional[str] = Field(
        None, description="Machine-readable failure kind; absent on success."
    )


__all__ = ["AskRequest", "ChatReply"]
