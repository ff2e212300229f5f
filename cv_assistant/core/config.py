"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the services and the
maintenance scripts share a single configuration surface. Secrets are optional:
a missing secret surfaces as a misconfiguration when the feature that needs it
is used, not as a crash on startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from cv_assistant.core.errors import MisconfigurationError


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()

_BASE_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class ChatSettings(BaseSettings):
    """Configuration for the hosted chat-completion API."""

    model_config = _BASE_CONFIG

    api_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("CHAT_API_KEY", "COMET_API_KEY"),
    )
    base_url: str = Field("https://api.cometapi.com/v1", validation_alias="CHAT_API_BASE_URL")
    model_name: str = Field("gpt-4o", validation_alias="CHAT_MODEL")
    timeout_seconds: float = Field(30.0, gt=0, validation_alias="CHAT_TIMEOUT_SECONDS")
    max_question_chars: int = Field(
        2000,
        gt=0,
        validation_alias="CHAT_MAX_QUESTION_CHARS",
        description="Questions longer than this are refused before any outbound call.",
    )
    app_title: str = Field("CV Assistant", validation_alias="CHAT_APP_TITLE")


class IntraSettings(BaseSettings):
    """Configuration for the 42 intranet API and its local fallback data."""

    model_config = _BASE_CONFIG

    client_id: Optional[str] = Field(None, validation_alias="INTRA_CLIENT_ID")
    client_secret: Optional[str] = Field(None, validation_alias="INTRA_CLIENT_SECRET")
    token_url: str = Field(
        "https://api.intra.42.fr/oauth/token", validation_alias="INTRA_TOKEN_URL"
    )
    api_base_url: str = Field("https://api.intra.42.fr", validation_alias="INTRA_API_BASE_URL")
    timeout_seconds: float = Field(20.0, gt=0, validation_alias="INTRA_TIMEOUT_SECONDS")
    token_margin_seconds: int = Field(
        30,
        ge=30,
        le=60,
        validation_alias="INTRA_TOKEN_MARGIN_SECONDS",
        description="Seconds shaved off the reported token lifetime before it is considered expired.",
    )
    fallback_dir: Path = Field(Path("data/profiles"), validation_alias="INTRA_FALLBACK_DIR")
    user_agent: str = Field("CvAssistant/1.0", validation_alias="INTRA_USER_AGENT")
    challenge_markers: Annotated[tuple[str, ...], NoDecode] = Field(
        ("Just a moment", "cf-chl", "challenge-platform"),
        validation_alias="INTRA_CHALLENGE_MARKERS",
    )

    @field_validator("challenge_markers", mode="before")
    @classmethod
    def _split_markers(cls, value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
        """Support providing markers as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(marker.strip() for marker in value.split(",") if marker.strip())


class StorageSettings(BaseSettings):
    """Location of the contact message database and the résumé document."""

    model_config = _BASE_CONFIG

    database_url: str = Field(
        "sqlite:///./data/cv_assistant.db", validation_alias="DATABASE_URL"
    )
    resume_path: Path = Field(Path("data/cv.json"), validation_alias="RESUME_PATH")

    @property
    def database_path(self) -> Path:
        """
        Filesystem path of the SQLite database.

        Other schemes load without error and are reported here, when the
        message store is first built.
        """
        if "://" in self.database_url and not self.database_url.startswith("sqlite://"):
            raise MisconfigurationError(
                "DATABASE_URL", detail="must be a sqlite:/// URL or a file path."
            )
        if self.database_url.startswith("sqlite:///"):
            return Path(self.database_url[len("sqlite:///"):])
        if self.database_url.startswith("sqlite://"):
            return Path(self.database_url[len("sqlite://"):])
        return Path(self.database_url)


class AdminSettings(BaseSettings):
    """Shared secret gating the message listing."""

    model_config = _BASE_CONFIG

    password: Optional[str] = Field(None, validation_alias="ADMIN_PASSWORD")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = _BASE_CONFIG

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    chat: ChatSettings = Field(default_factory=ChatSettings)
    intra: IntraSettings = Field(default_factory=IntraSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    admin: AdminSettings = Field(default_factory=AdminSettings)

    def secret_status(self) -> dict[str, str]:
        """Report which secrets are configured without revealing them."""
        secrets = {
            "CHAT_API_KEY": self.chat.api_key,
            "INTRA_CLIENT_ID": self.intra.client_id,
            "INTRA_CLIENT_SECRET": self.intra.client_secret,
            "ADMIN_PASSWORD": self.admin.password,
        }
        return {
            name: "<set>" if value and value.strip() else "<missing>"
            for name, value in secrets.items()
        }


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AdminSettings",
    "AppSettings",
    "ChatSettings",
    "IntraSettings",
    "StorageSettings",
    "get_settings",
]
