from __future__ import annotations  # Durable key-value store for session data

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Dict, Optional, Protocol

SESSION_CONTEXT_PREFIX = "session_context"
INTERVIEW_SUMMARY_PREFIX = "interview_summary"


def context_key(session_id: str) -> str:  # Key for the session's preparation context
    return f"{SESSION_CONTEXT_PREFIX}:{session_id}"


def summary_key(session_id: str) -> str:  # Key for the finished interview ledger
    return f"{INTERVIEW_SUMMARY_PREFIX}:{session_id}"


class SessionStore(Protocol):  # Opaque keyed blobs
    def put(self, key: str, blob: str) -> None: ...

    def get(self, key: str) -> Optional[str]: ...


class InMemorySessionStore:  # Thread-safe in-memory store
    def __init__(self) -> None:
        self._blobs: Dict[str, str] = {}
        self._lock = RLock()

    def put(self, key: str, blob: str) -> None:
        with self._lock:
            self._blobs[key] = blob

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._blobs.get(key)


class SqliteSessionStore:  # SQLite-backed persistence for session blobs
    def __init__(self, path: Path) -> None:  # Initialize store with database path
        self._path = Path(path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:  # Open SQLite connection
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:  # Create persistence table if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_blobs (
                    key TEXT PRIMARY KEY,
                    blob TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def put(self, key: str, blob: str) -> None:  # Insert or replace a blob
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO session_blobs (key, blob, updated_at) VALUES (?, ?, ?)",
                (key, blob, now),
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:  # Load a blob or None
        conn = self._connect()
        try:
            row = conn.execute("SELECT blob FROM session_blobs WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return None if row is None else row["blob"]


__all__ = [
    "InMemorySessionStore",
    "SessionStore",
    "SqliteSessionStore",
    "context_key",
    "summary_key",
]
