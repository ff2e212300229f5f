"""Error envelope returned by the JSON endpoints."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Typed error envelope shared by the JSON endpoints."""

    error: str
    message: str


__all__ = ["ErrorResponse"]
