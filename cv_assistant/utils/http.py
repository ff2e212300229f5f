"""HTTP utilities translating httpx failures into the upstream error taxonomy."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx

from cv_assistant.core.errors import MalformedResponse, TransportError, UpstreamRejection


async def send_checked(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    service: str,
    **kwargs,
) -> httpx.Response:
    """Issue a single request and raise a typed error for transport or status failures.

    No retries are attempted; callers decide how to recover.
    """
    try:
        response = await func(*args, **kwargs)
    except httpx.TimeoutException as exc:
        raise TransportError(f"{service} request timed out.") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"{service} request failed: {type(exc).__name__}.") from exc

    if not response.is_success:
        raise UpstreamRejection(
            f"{service} returned HTTP {response.status_code}.",
            status_code=response.status_code,
            body=response.text,
        )
    return response


def parse_json(response: httpx.Response, *, service: str) -> Any:
    """Decode a JSON body or raise ``MalformedResponse``."""
    try:
        return response.json()
    except ValueError as exc:
        raise MalformedResponse(f"{service} returned a non-JSON body.") from exc


__all__ = ["parse_json", "send_checked"]
