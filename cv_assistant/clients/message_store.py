"""SQLite-backed storage for contact messages."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path

from cv_assistant.core.errors import MessageStoreUnavailableError
from cv_assistant.models.contact_message import ContactMessage


class ContactMessageStore:
    """Append-only table of contact submissions."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS contact_messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    company TEXT NOT NULL,
                    contact TEXT NOT NULL,
                    message TEXT NOT NULL,
                    date TEXT NOT NULL
                )
                """
            )

    def add(self, message: ContactMessage) -> ContactMessage:
        """Insert ``message`` and return a copy carrying the assigned id."""
        try:
            with closing(self._connect()) as conn, conn:
                cursor = conn.execute(
                    """
                    INSERT INTO contact_messages (company, contact, message, date)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        message.company,
                        message.contact,
                        message.message,
                        message.date.isoformat(timespec="microseconds"),
                    ),
                )
                new_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise MessageStoreUnavailableError("Could not save the contact message.") from exc
        return message.model_copy(update={"id": new_id})

    def list_all(self) -> list[ContactMessage]:
        """Return every stored message, newest first."""
        try:
            with closing(self._connect()) as conn, conn:
                rows = conn.execute(
                    """
                    SELECT id, company, contact, message, date
                    FROM contact_messages
                    ORDER BY date DESC, id DESC
                    """
                ).fetchall()
        except sqlite3.Error as exc:
            raise MessageStoreUnavailableError("Could not read contact messages.") from exc
        return [
            ContactMessage(
                id=row["id"],
                company=row["company"],
                contact=row["contact"],
                message=row["message"],
                date=datetime.fromisoformat(row["date"]),
            )
            for row in rows
        ]


__all__ = ["ContactMessageStore"]
