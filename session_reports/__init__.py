from __future__ import annotations  # Session report package exports

from .store import InMemorySessionStore, SessionStore, SqliteSessionStore, context_key, summary_key

__all__ = ["InMemorySessionStore", "SessionStore", "SqliteSessionStore", "context_key", "summary_key"]
