"""Fetch 42 intranet profiles, falling back to local documents on any failure."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from cv_assistant.clients.fallback_profiles import FallbackProfileStore
from cv_assistant.clients.intra_api import IntraApiClient
from cv_assistant.clients.intra_auth import IntraOAuthClient
from cv_assistant.core.errors import (
    MisconfigurationError,
    ProfileNotFoundError,
    UpstreamError,
    UpstreamRejection,
)
from cv_assistant.services.token_cache import TokenCache

logger = logging.getLogger(__name__)

INTRA_TOKEN_KEY = "intra42"


@dataclass(slots=True)
class ProfileResult:
    """Profile document plus where it came from. Only ``content`` is served."""

    content: bytes
    source: Literal["remote", "fallback"]
    reason: Optional[str] = None


class ProfileService:
    """Resolve a login to a profile JSON document."""

    def __init__(
        self,
        *,
        oauth_client: IntraOAuthClient,
        api_client: IntraApiClient,
        token_cache: TokenCache,
        fallback_store: FallbackProfileStore,
        cache_key: str = INTRA_TOKEN_KEY,
    ) -> None:
        self._oauth = oauth_client
        self._api = api_client
        self._cache = token_cache
        self._fallback = fallback_store
        self._cache_key = cache_key

    async def get_access_token(self) -> str:
        """Return a cached token or perform the client-credentials exchange."""
        return await self._cache.get_token(self._cache_key, self._oauth.request_token)

    def token_lifetime_remaining(self) -> float:
        return self._cache.remaining_seconds(self._cache_key)

    async def get_profile(self, login: str) -> ProfileResult:
        try:
            access_token = await self.get_access_token()
        except MisconfigurationError as exc:
            logger.warning("42 API credentials missing (%s).", exc.setting)
            return await self._fallback_profile(login, reason=exc.kind)
        except UpstreamError as exc:
            logger.warning("Access token could not be obtained: %s", exc)
            return await self._fallback_profile(login, reason=f"token:{exc.kind}")

        try:
            content = await self._api.fetch_user(login, access_token=access_token)
        except UpstreamRejection as exc:
            if exc.status_code == 401:
                self._cache.invalidate(self._cache_key)
            logger.warning(
                "42 API call failed with %s. Falling back to local JSON.", exc.status_code
            )
            return await self._fallback_profile(login, reason=f"profile:{exc.kind}:{exc.status_code}")
        except UpstreamError as exc:
            logger.error("Unexpected error fetching 42 profile for %s: %s", login, exc)
            return await self._fallback_profile(login, reason=f"profile:{exc.kind}")

        logger.info("Fetched 42 profile for %s from the API", login)
        return ProfileResult(content=content, source="remote")

    async def _fallback_profile(self, login: str, *, reason: str) -> ProfileResult:
        content = await self._fallback.load(login)
        if content is None:
            logger.warning(
                "Fallback file not found for login %s (reason: %s)", login, reason
            )
            raise ProfileNotFoundError(login)

        logger.info("Loaded fallback profile for %s (reason: %s)", login, reason)
        return ProfileResult(content=content, source="fallback", reason=reason)


__all__ = ["INTRA_TOKEN_KEY", "ProfileResult", "ProfileService"]
