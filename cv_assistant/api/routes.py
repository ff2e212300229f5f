"""
FastAPI routes for the CV assistant backend.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Header, Path, Response
from fastapi.responses import JSONResponse

from cv_assistant.clients.fallback_profiles import LOGIN_PATTERN
from cv_assistant.core.errors import (
    ContactParseError,
    EmptyQuestionError,
    FallbackReadError,
    InvalidCredentialError,
    MessageStoreUnavailableError,
    MisconfigurationError,
    ProfileNotFoundError,
    QuestionTooLongError,
    TransportError,
    UpstreamError,
)
from cv_assistant.core.redaction import REDACTED
from cv_assistant.dependencies import (
    get_chat_assistant_service,
    get_contact_message_service,
    get_intra_settings,
    get_profile_service,
)
from cv_assistant.schemas import (
    AskRequest,
    ChatReply,
    ContactMessageView,
    ErrorResponse,
    SendMessageRequest,
    SendMessageResult,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_CHAT_UNAVAILABLE_REPLY = "Sorry, I can't answer right now. Please try again later."


def _error(status: HTTPStatus, kind: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=ErrorResponse(error=kind, message=message).model_dump(),
    )


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/chat/ask", response_model=ChatReply)
async def ask(
    payload: AskRequest,
    service: Annotated[Any, Depends(get_chat_assistant_service)],
) -> Any:
    """Answer a question about the résumé."""
    try:
        reply = await service.ask(payload.user_message)
    except (EmptyQuestionError, QuestionTooLongError) as exc:
        return JSONResponse(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            content=ChatReply(reply=str(exc), error=exc.kind).model_dump(),
        )
    except MisconfigurationError as exc:
        logger.error("Chat unavailable: %s", exc)
        status = HTTPStatus.SERVICE_UNAVAILABLE
        kind = exc.kind
    except TransportError as exc:
        logger.warning("Chat API unreachable: %s", exc)
        status = HTTPStatus.GATEWAY_TIMEOUT
        kind = exc.kind
    except UpstreamError as exc:
        logger.warning("Chat API failed: %s", exc)
        status = HTTPStatus.BAD_GATEWAY
        kind = exc.kind
    else:
        return ChatReply(reply=reply)

    return JSONResponse(
        status_code=status,
        content=ChatReply(reply=_CHAT_UNAVAILABLE_REPLY, error=kind).model_dump(),
    )


@router.post(
    "/messages",
    response_model=SendMessageResult,
    status_code=HTTPStatus.CREATED,
)
async def send_message(
    payload: SendMessageRequest,
    service: Annotated[Any, Depends(get_contact_message_service)],
) -> Any:
    """Parse a free-text contact request and store it."""
    try:
        record = await service.submit(payload.user_message)
    except ContactParseError as exc:
        return JSONResponse(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            content=SendMessageResult(
                reply=str(exc),
                error=exc.kind,
                missing_fields=exc.missing_fields,
            ).model_dump(),
        )
    except MessageStoreUnavailableError as exc:
        logger.error("Contact message could not be stored: %s", exc.__cause__ or exc)
        return JSONResponse(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            content=SendMessageResult(
                reply="Your message could not be saved right now. Please try again later.",
                error=exc.kind,
            ).model_dump(),
        )

    logger.info("Stored contact message %s", record.id)
    return SendMessageResult(
        reply=f"Thanks! Your message from {record.contact} at {record.company} was saved.",
        id=record.id,
    )


@router.get("/messages", response_model=list[ContactMessageView])
async def list_messages(
    service: Annotated[Any, Depends(get_contact_message_service)],
    admin_password: Optional[str] = Header(default=None, alias="X-Admin-Password"),
) -> Any:
    """Return every stored message, newest first, to the admin."""
    try:
        records = await service.list_messages(admin_password)
    except MisconfigurationError as exc:
        logger.error("Message listing requested but %s", exc)
        return _error(HTTPStatus.SERVICE_UNAVAILABLE, exc.kind, "Admin access is not configured.")
    except InvalidCredentialError as exc:
        logger.warning("Message listing rejected: invalid password")
        return _error(HTTPStatus.UNAUTHORIZED, exc.kind, "Invalid password.")
    except MessageStoreUnavailableError as exc:
        logger.error("Contact messages could not be read: %s", exc.__cause__ or exc)
        return _error(HTTPStatus.SERVICE_UNAVAILABLE, exc.kind, str(exc))

    return [ContactMessageView.from_model(record) for record in records]


@router.get("/school42/options")
async def check_intra_options(
    settings: Annotated[Any, Depends(get_intra_settings)],
) -> dict:
    """Report whether the 42 credentials are configured, never their values."""

    def _status(value: Optional[str]) -> str:
        return "<set>" if value and value.strip() else "<missing>"

    return {
        "client_id": _status(settings.client_id),
        "client_secret": _status(settings.client_secret),
    }


@router.get("/school42/token")
async def intra_token_status(
    service: Annotated[Any, Depends(get_profile_service)],
) -> Any:
    """Acquire (or reuse) the 42 access token without revealing it."""
    try:
        await service.get_access_token()
    except MisconfigurationError as exc:
        return _error(HTTPStatus.SERVICE_UNAVAILABLE, exc.kind, str(exc))
    except UpstreamError as exc:
        logger.warning("Token test failed: %s", exc)
        return _error(
            HTTPStatus.BAD_GATEWAY,
            "token_unavailable",
            f"Token fetch failed ({exc.kind}); check logs.",
        )

    return {
        "token": REDACTED,
        "cached_for_seconds": int(service.token_lifetime_remaining()),
    }


@router.get("/school42/profile/{login}")
async def get_profile(
    service: Annotated[Any, Depends(get_profile_service)],
    login: str = Path(..., pattern=LOGIN_PATTERN.pattern),
) -> Response:
    """Return the 42 profile JSON, from the API or the local fallback."""
    try:
        result = await service.get_profile(login)
    except ProfileNotFoundError as exc:
        return _error(HTTPStatus.NOT_FOUND, exc.kind, str(exc))
    except FallbackReadError as exc:
        logger.error("Failed to load fallback profile for %s: %s", login, exc)
        return _error(HTTPStatus.INTERNAL_SERVER_ERROR, exc.kind, "Fallback profile unreadable.")

    logger.debug("Serving %s profile for %s", result.source, login)
    return Response(content=result.content, media_type="application/json")


__all__ = ["router"]
