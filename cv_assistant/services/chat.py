"""Answer questions about the résumé through the chat-completions API."""

from __future__ import annotations

import logging
from pathlib import Path
from textwrap import dedent

from cv_assistant.clients.chat_completions import ChatCompletionsClient
from cv_assistant.core.errors import EmptyQuestionError, QuestionTooLongError

logger = logging.getLogger(__name__)

NOT_AVAILABLE_REPLY = "Sorry, info not available."


def load_resume(path: Path | str) -> str:
    """Read the résumé document used to build the persona."""
    return Path(path).read_text(encoding="utf-8")


class ChatAssistantService:
    """Build persona prompts from the résumé and relay them to the chat API."""

    def __init__(
        self,
        chat_client: ChatCompletionsClient,
        *,
        resume: str,
        max_question_chars: int = 2000,
    ) -> None:
        self._chat = chat_client
        self._resume = resume
        self._max_question_chars = max_question_chars

    def build_system_prompt(self) -> str:
        return dedent(
            """
            You are a junior software developer looking for a junior or intern
            position. Answer as yourself, using only the résumé below. Reply in
            plain text, never as JSON.

            Résumé:
            """
        ).strip() + f"\n{self._resume}"

    def build_user_prompt(self, question: str) -> str:
        return (
            f"Question: {question}\n"
            "If the résumé does not contain the information, answer "
            f"'{NOT_AVAILABLE_REPLY}'"
        )

    async def ask(self, user_message: str) -> str:
        """Return the assistant's reply. Upstream failures propagate as typed errors."""
        question = user_message.strip()
        if not question:
            raise EmptyQuestionError()
        if len(question) > self._max_question_chars:
            raise QuestionTooLongError(len(question), self._max_question_chars)

        reply = await self._chat.complete(
            system_prompt=self.build_system_prompt(),
            user_prompt=self.build_user_prompt(question),
        )
        return reply or NOT_AVAILABLE_REPLY


__all__ = ["ChatAssistantService", "NOT_AVAILABLE_REPLY", "load_resume"]
