try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest

from cv_assistant.clients.fallback_profiles import FallbackProfileStore
from cv_assistant.clients.intra_auth import TokenGrant
from cv_assistant.clients.message_store import ContactMessageStore
from cv_assistant.core.config import IntraSettings
from cv_assistant.core.errors import (
    BlockedByUpstream,
    MalformedResponse,
    MisconfigurationError,
    TransportError,
    UpstreamRejection,
)
from cv_assistant.main import app
from cv_assistant.models.contact_message import ContactMessage
from cv_assistant.services.contact_messages import ContactMessageService
from cv_assistant.services.profiles import ProfileService
from cv_assistant.services.token_cache import TokenCache

PEDMONTE_BYTES = b'{"login":"pedmonte","cursus_users":[{"level":7.42}]}'


class StubChatService:
    def __init__(self, *, reply: str = "I know Python.", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.questions: list[str] = []

    async def ask(self, user_message: str) -> str:
        self.questions.append(user_message)
        if self.error is not None:
            raise self.error
        return self.reply


class BlockedOAuthClient:
    async def request_token(self) -> TokenGrant:
        raise BlockedByUpstream("42 token endpoint served an anti-automation challenge.", status_code=403)


class WorkingOAuthClient:
    async def request_token(self) -> TokenGrant:
        return TokenGrant(access_token="real-token-value", expires_in=7200)


class FailingApiClient:
    async def fetch_user(self, login: str, *, access_token: str) -> bytes:
        raise UpstreamRejection("42 API returned HTTP 503.", status_code=503)


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    )


@pytest.fixture()
def overrides():
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture()
def message_service(tmp_path: Path, overrides) -> ContactMessageService:
    from cv_assistant import dependencies

    service = ContactMessageService(
        ContactMessageStore(tmp_path / "messages.db"), admin_password="s3cret"
    )
    overrides[dependencies.get_contact_message_service] = lambda: service
    return service


def _profile_service(tmp_path: Path, oauth, api=None) -> ProfileService:
    (tmp_path / "pedmonte.json").write_bytes(PEDMONTE_BYTES)
    return ProfileService(
        oauth_client=oauth,
        api_client=api or FailingApiClient(),
        token_cache=TokenCache(),
        fallback_store=FallbackProfileStore(tmp_path),
    )


@pytest.mark.anyio
async def test_health() -> None:
    async with _client() as client:
        response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_ask_returns_reply(overrides) -> None:
    from cv_assistant import dependencies

    stub = StubChatService()
    overrides[dependencies.get_chat_assistant_service] = lambda: stub

    async with _client() as client:
        response = await client.post("/api/chat/ask", json={"user_message": "Languages?"})

    assert response.status_code == 200
    assert response.json() == {"reply": "I know Python.", "error": None}
    assert stub.questions == ["Languages?"]


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("error", "status", "kind"),
    [
        (TransportError("Chat API request timed out."), 504, "transport_error"),
        (UpstreamRejection("Chat API returned HTTP 500.", status_code=500), 502, "upstream_rejection"),
        (MalformedResponse("Chat API returned a non-JSON body."), 502, "malformed_response"),
        (MisconfigurationError("CHAT_API_KEY"), 503, "misconfigured"),
    ],
)
async def test_ask_failures_use_typed_envelope(overrides, error, status, kind) -> None:
    from cv_assistant import dependencies

    overrides[dependencies.get_chat_assistant_service] = lambda: StubChatService(error=error)

    async with _client() as client:
        response = await client.post("/api/chat/ask", json={"user_message": "Hi"})

    assert response.status_code == status
    data = response.json()
    assert data["error"] == kind
    assert not data["reply"].startswith("Error:")


@pytest.mark.anyio
async def test_ask_rejects_blank_question(overrides) -> None:
    from cv_assistant import dependencies

    overrides[dependencies.get_chat_assistant_service] = lambda: StubChatService()

    async with _client() as client:
        response = await client.post("/api/chat/ask", json={"user_message": ""})

    assert response.status_code == 422


@pytest.mark.anyio
async def test_send_message_stores_record(message_service: ContactMessageService) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/messages",
            json={"user_message": "Company: TechCorp, Contact: Jane Doe, Message: Hello"},
        )

    assert response.status_code == 201
    data = response.json()
    assert data["id"] is not None
    assert "Jane Doe" in data["reply"] and "TechCorp" in data["reply"]


@pytest.mark.anyio
async def test_send_message_parse_error(message_service: ContactMessageService) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/messages",
            json={"user_message": "Company: TechCorp, Contact: Jane Doe"},
        )
        listing = await client.get("/api/messages", headers={"X-Admin-Password": "s3cret"})

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "parse_error"
    assert "Message" in data["missing_fields"]
    assert listing.json() == []


@pytest.mark.anyio
async def test_list_messages_newest_first(message_service: ContactMessageService, tmp_path: Path) -> None:
    store = ContactMessageStore(tmp_path / "messages.db")
    base = datetime(2025, 5, 4, 8, 0, 0, tzinfo=timezone.utc)
    store.add(ContactMessage(company="Old", contact="A", message="first", date=base))
    store.add(
        ContactMessage(company="New", contact="B", message="second", date=base + timedelta(hours=1))
    )

    async with _client() as client:
        response = await client.get("/api/messages", headers={"X-Admin-Password": "s3cret"})

    assert response.status_code == 200
    data = response.json()
    assert [item["company"] for item in data] == ["New", "Old"]
    assert data[0]["date"] == "2025-05-04 09:00:00"
    assert data[1]["date"] == "2025-05-04 08:00:00"


@pytest.mark.anyio
async def test_list_messages_wrong_password(message_service: ContactMessageService) -> None:
    await message_service.submit("Company: Secret Co, Contact: X, Message: private")

    async with _client() as client:
        response = await client.get("/api/messages", headers={"X-Admin-Password": "guess"})

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_password"
    assert "Secret Co" not in response.text


@pytest.mark.anyio
async def test_list_messages_unconfigured_password(tmp_path: Path, overrides) -> None:
    from cv_assistant import dependencies

    service = ContactMessageService(ContactMessageStore(tmp_path / "m.db"), admin_password=None)
    overrides[dependencies.get_contact_message_service] = lambda: service

    async with _client() as client:
        response = await client.get("/api/messages", headers={"X-Admin-Password": "anything"})

    assert response.status_code == 503
    assert response.json()["error"] == "misconfigured"


@pytest.mark.anyio
async def test_profile_falls_back_to_exact_file_bytes(tmp_path: Path, overrides) -> None:
    from cv_assistant import dependencies

    service = _profile_service(tmp_path, BlockedOAuthClient())
    overrides[dependencies.get_profile_service] = lambda: service

    async with _client() as client:
        response = await client.get("/api/school42/profile/pedmonte")

    assert response.status_code == 200
    assert response.content == PEDMONTE_BYTES
    assert response.headers["content-type"].startswith("application/json")


@pytest.mark.anyio
async def test_profile_not_found(tmp_path: Path, overrides) -> None:
    from cv_assistant import dependencies

    service = _profile_service(tmp_path, BlockedOAuthClient())
    overrides[dependencies.get_profile_service] = lambda: service

    async with _client() as client:
        response = await client.get("/api/school42/profile/nobody")

    assert response.status_code == 404
    assert response.json()["error"] == "ProfileNotFound"
    assert "blocked" not in response.text


@pytest.mark.anyio
async def test_profile_rejects_unsafe_login(tmp_path: Path, overrides) -> None:
    from cv_assistant import dependencies

    service = _profile_service(tmp_path, BlockedOAuthClient())
    overrides[dependencies.get_profile_service] = lambda: service

    async with _client() as client:
        response = await client.get("/api/school42/profile/bad.login")

    assert response.status_code == 422


@pytest.mark.anyio
async def test_token_endpoint_never_reveals_token(tmp_path: Path, overrides) -> None:
    from cv_assistant import dependencies

    service = _profile_service(tmp_path, WorkingOAuthClient())
    overrides[dependencies.get_profile_service] = lambda: service

    async with _client() as client:
        response = await client.get("/api/school42/token")

    assert response.status_code == 200
    data = response.json()
    assert data["token"] == "<redacted>"
    assert data["cached_for_seconds"] > 0
    assert "real-token-value" not in response.text


@pytest.mark.anyio
async def test_token_endpoint_reports_failure_kind(tmp_path: Path, overrides) -> None:
    from cv_assistant import dependencies

    service = _profile_service(tmp_path, BlockedOAuthClient())
    overrides[dependencies.get_profile_service] = lambda: service

    async with _client() as client:
        response = await client.get("/api/school42/token")

    assert response.status_code == 502
    data = response.json()
    assert data["error"] == "token_unavailable"
    assert "blocked_by_upstream" in data["message"]


@pytest.mark.anyio
async def test_options_report_presence_only(overrides) -> None:
    from cv_assistant import dependencies

    settings = IntraSettings(INTRA_CLIENT_ID="visible-id", INTRA_CLIENT_SECRET="")
    overrides[dependencies.get_intra_settings] = lambda: settings

    async with _client() as client:
        response = await client.get("/api/school42/options")

    assert response.json() == {"client_id": "<set>", "client_secret": "<missing>"}
    assert "visible-id" not in response.text


@pytest.mark.anyio
async def test_dependency_misconfiguration_is_reported(overrides) -> None:
    from cv_assistant import dependencies

    def broken_service():
        raise MisconfigurationError("RESUME_PATH")

    overrides[dependencies.get_chat_assistant_service] = broken_service

    async with _client() as client:
        response = await client.post("/api/chat/ask", json={"user_message": "Hi"})

    assert response.status_code == 503
    assert response.json() == {"error": "misconfigured", "message": "RESUME_PATH is not configured."}


@pytest.fixture()
def unsupported_database_url(monkeypatch: pytest.MonkeyPatch):
    import cv_assistant.dependencies.clients as client_factories
    from cv_assistant.core.config import get_settings

    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db.example:5432/cv")
    caches = (get_settings, client_factories._settings, client_factories.get_message_store)
    for cached in caches:
        cached.cache_clear()
    yield
    for cached in caches:
        cached.cache_clear()


@pytest.mark.anyio
async def test_unsupported_database_url_only_disables_messages(unsupported_database_url) -> None:
    from cv_assistant import dependencies
    from cv_assistant.main import create_app

    fresh_app = create_app()
    fresh_app.dependency_overrides[dependencies.get_chat_assistant_service] = lambda: StubChatService()

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=fresh_app), base_url="http://testserver"
    ) as client:
        chat = await client.post("/api/chat/ask", json={"user_message": "Languages?"})
        health = await client.get("/api/health")
        message = await client.post(
            "/api/messages",
            json={"user_message": "Company: TechCorp, Contact: Jane Doe, Message: Hello"},
        )

    assert chat.status_code == 200
    assert chat.json()["reply"] == "I know Python."
    assert health.status_code == 200
    assert message.status_code == 503
    assert message.json() == {
        "error": "misconfigured",
        "message": "DATABASE_URL must be a sqlite:/// URL or a file path.",
    }


@pytest.mark.anyio
async def test_ask_rejects_whitespace_only_question(overrides) -> None:
    from cv_assistant import dependencies

    stub = StubChatService()
    overrides[dependencies.get_chat_assistant_service] = lambda: stub

    async with _client() as client:
        response = await client.post("/api/chat/ask", json={"user_message": "   \n\t"})

    assert response.status_code == 422
    assert stub.questions == []
