"""Client wrapper for an OpenAI-compatible chat-completions endpoint."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cv_assistant.core.config import ChatSettings
from cv_assistant.core.errors import MalformedResponse, MisconfigurationError
from cv_assistant.utils.http import parse_json, send_checked

logger = logging.getLogger(__name__)

_SERVICE = "Chat API"


class ChatCompletionsClient:
    """Send a system+user message pair and return the first completion text."""

    def __init__(
        self,
        settings: ChatSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        api_key = (self._settings.api_key or "").strip()
        if not api_key:
            raise MisconfigurationError("CHAT_API_KEY")

        payload = {
            "model": self._settings.model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "X-Title": self._settings.app_title,
        }

        async with httpx.AsyncClient(
            base_url=self._settings.base_url.rstrip("/") + "/",
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        ) as client:
            response = await send_checked(
                client.post,
                "chat/completions",
                json=payload,
                headers=headers,
                service=_SERVICE,
            )

        body = parse_json(response, service=_SERVICE)
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedResponse(f"{_SERVICE} response has no completion content.") from exc
        if not isinstance(content, str):
            raise MalformedResponse(f"{_SERVICE} completion content is not text.")

        logger.debug("Chat completion received (%d chars)", len(content))
        return content.strip()


__all__ = ["ChatCompletionsClient"]
