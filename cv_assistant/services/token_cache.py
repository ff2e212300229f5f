"""
In-process cache for short-lived bearer tokens.

Each cache key moves through Absent -> Fetching -> Valid -> Expired. Expiry is
checked lazily on access. While a key is Fetching, further callers await the
same in-flight task instead of starting their own exchange.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from cv_assistant.clients.intra_auth import TokenGrant

logger = logging.getLogger(__name__)

MIN_LIFETIME_SECONDS = 30


@dataclass(frozen=True, slots=True)
class CachedToken:
    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenCache:
    """Hold one bearer token per service key with single-flight refresh."""

    def __init__(
        self,
        *,
        margin_seconds: int = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._margin = margin_seconds
        self._clock = clock
        self._tokens: dict[str, CachedToken] = {}
        self._inflight: dict[str, asyncio.Task[CachedToken]] = {}

    def peek(self, key: str) -> Optional[CachedToken]:
        """Return the cached token for ``key`` if it is still valid."""
        token = self._tokens.get(key)
        if token is None:
            return None
        if not token.is_valid(self._clock()):
            del self._tokens[key]
            return None
        return token

    def invalidate(self, key: str) -> None:
        self._tokens.pop(key, None)

    def remaining_seconds(self, key: str) -> float:
        token = self.peek(key)
        if token is None:
            return 0.0
        return max(token.expires_at - self._clock(), 0.0)

    async def get_token(
        self, key: str, fetch: Callable[[], Awaitable[TokenGrant]]
    ) -> str:
        """
        Return a valid token for ``key``, calling ``fetch`` when none is cached.

        Errors raised by ``fetch`` propagate to every caller waiting on that
        fetch and leave the key empty.
        """
        cached = self.peek(key)
        if cached is not None:
            return cached.value

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(key, fetch))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._clear_inflight(key, done))
        # Shielded so a cancelled caller does not abort the fetch for the others.
        token = await asyncio.shield(task)
        return token.value

    async def _refresh(
        self, key: str, fetch: Callable[[], Awaitable[TokenGrant]]
    ) -> CachedToken:
        self._tokens.pop(key, None)
        grant = await fetch()
        lifetime = max(grant.expires_in - self._margin, MIN_LIFETIME_SECONDS)
        token = CachedToken(value=grant.access_token, expires_at=self._clock() + lifetime)
        self._tokens[key] = token
        logger.info("Access token for %s cached for %ss", key, lifetime)
        return token

    def _clear_inflight(self, key: str, task: asyncio.Task[CachedToken]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # Mark the exception as retrieved when every waiter was cancelled.
            task.exception()


__all__ = ["CachedToken", "MIN_LIFETIME_SECONDS", "TokenCache"]
