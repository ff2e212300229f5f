"""Pre-fetched profile documents read from the local data directory."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Optional

from cv_assistant.core.errors import FallbackReadError

LOGIN_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class FallbackProfileStore:
    """Serve ``<login>.json`` files verbatim."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    def path_for(self, login: str) -> Path:
        if not LOGIN_PATTERN.fullmatch(login):
            raise ValueError(f"Invalid login identifier: {login!r}")
        return self._directory / f"{login}.json"

    async def load(self, login: str) -> Optional[bytes]:
        """Return the stored document, or ``None`` when no file exists."""
        try:
            path = self.path_for(login)
        except ValueError:
            return None
        return await asyncio.to_thread(self._read, path)

    @staticmethod
    def _read(path: Path) -> Optional[bytes]:
        if not path.is_file():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FallbackReadError(f"Could not read fallback file {path.name}.") from exc


__all__ = ["FallbackProfileStore", "LOGIN_PATTERN"]
