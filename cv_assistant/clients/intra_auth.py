"""
42 intranet OAuth utilities.

Exchanges the application's client credentials for a bearer token. Caching is
handled by ``TokenCache``; this client performs exactly one request per call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from cv_assistant.core.config import IntraSettings
from cv_assistant.core.errors import (
    BlockedByUpstream,
    MalformedResponse,
    MisconfigurationError,
    UpstreamRejection,
)
from cv_assistant.core.redaction import redact_string, snippet
from cv_assistant.utils.http import parse_json, send_checked

logger = logging.getLogger(__name__)

_SERVICE = "42 token endpoint"
DEFAULT_EXPIRES_IN = 3600


@dataclass(frozen=True, slots=True)
class TokenGrant:
    """Token endpoint answer."""

    access_token: str
    expires_in: int


class IntraOAuthClient:
    """Request client-credential grants from the 42 token endpoint."""

    def __init__(
        self,
        settings: IntraSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(
            (self._settings.client_id or "").strip()
            and (self._settings.client_secret or "").strip()
        )

    async def request_token(self) -> TokenGrant:
        """
        Perform the client-credentials exchange.

        Raises ``MisconfigurationError`` when credentials are absent and an
        ``UpstreamError`` subclass for every other failure.
        """
        client_id = (self._settings.client_id or "").strip()
        client_secret = (self._settings.client_secret or "").strip()
        if not client_id:
            raise MisconfigurationError("INTRA_CLIENT_ID")
        if not client_secret:
            raise MisconfigurationError("INTRA_CLIENT_SECRET")

        payload = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
        }
        headers = {
            "Accept": "application/json",
            "User-Agent": f"{self._settings.user_agent} (TokenRequest)",
        }

        logger.info("Fetching new 42 access token...")
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds, transport=self._transport
            ) as client:
                response = await send_checked(
                    client.post,
                    self._settings.token_url,
                    data=payload,
                    headers=headers,
                    service=_SERVICE,
                )
        except UpstreamRejection as exc:
            body = redact_string(exc.body, secrets=(client_secret,))
            if exc.status_code == 403 and self._is_challenge(exc.body):
                logger.warning(
                    "Token request blocked by an anti-automation challenge: %s",
                    snippet(body),
                )
                raise BlockedByUpstream(
                    f"{_SERVICE} served an anti-automation challenge.",
                    status_code=exc.status_code,
                ) from exc
            logger.error(
                "Token request failed. StatusCode: %s, ResponseBody: %s",
                exc.status_code,
                snippet(body),
            )
            raise

        return self._parse_grant(parse_json(response, service=_SERVICE))

    def _is_challenge(self, body: str) -> bool:
        return any(marker in body for marker in self._settings.challenge_markers)

    @staticmethod
    def _parse_grant(token_payload: object) -> TokenGrant:
        if not isinstance(token_payload, dict):
            raise MalformedResponse(f"{_SERVICE} returned a non-object JSON body.")

        access_token = token_payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise MalformedResponse("Access token not found in token response.")

        raw_expires_in = token_payload.get("expires_in")
        if raw_expires_in is None:
            return TokenGrant(access_token=access_token, expires_in=DEFAULT_EXPIRES_IN)
        try:
            expires_in = int(raw_expires_in)
        except (TypeError, ValueError) as exc:
            raise MalformedResponse("Token response has a non-integer expires_in.") from exc
        return TokenGrant(access_token=access_token, expires_in=expires_in)


__all__ = ["DEFAULT_EXPIRES_IN", "IntraOAuthClient", "TokenGrant"]
