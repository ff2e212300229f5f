"""Client for the authenticated 42 intranet REST API."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from cv_assistant.core.config import IntraSettings
from cv_assistant.utils.http import send_checked

logger = logging.getLogger(__name__)

_SERVICE = "42 API"


class IntraApiClient:
    """Fetch user profiles with a bearer token."""

    def __init__(
        self,
        settings: IntraSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def fetch_user(self, login: str, *, access_token: str) -> bytes:
        """Return the raw JSON body of ``/v2/users/{login}``."""
        url = f"{self._settings.api_base_url.rstrip('/')}/v2/users/{quote(login, safe='')}"
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "User-Agent": self._settings.user_agent,
        }

        async with httpx.AsyncClient(
            timeout=self._settings.timeout_seconds, transport=self._transport
        ) as client:
            response = await send_checked(client.get, url, headers=headers, service=_SERVICE)

        cf_ray = response.headers.get("cf-ray")
        if cf_ray:
            logger.debug("42 API response cf-ray: %s", cf_ray)
        return response.content


__all__ = ["IntraApiClient"]
