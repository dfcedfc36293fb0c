"""Helpers for assembling, storing and tracking interview sessions."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from config.settings import settings
from interview_session.interview_session import InterviewSession
from interview_session.ledger import LedgerSnapshot
from interview_session.models import Modality, SessionContext
from session_reports.store import SessionStore, SqliteSessionStore, context_key, summary_key

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE_CODE = "en-US"

LANGUAGE_CODES: Dict[str, str] = {
    "english": "en-US",
    "spanish": "es-ES",
    "french": "fr-FR",
    "german": "de-DE",
    "hindi": "hi-IN",
    "hinglish": "en-IN",
}


class SessionNotFoundError(KeyError):
    """Raised when a session id has no live session or stored record."""


class PreparationData(BaseModel):  # Upstream preparation output
    job_role: str
    company: str
    language: str = Field(default_factory=lambda: settings.DEFAULT_LANGUAGE)
    skills: List[str] = Field(default_factory=list)
    experience_summary: str = ""
    candidate_name: Optional[str] = None


def language_code_for(language: str) -> str:
    """Map a language display name to the tag used by speech collaborators."""
    return LANGUAGE_CODES.get(language.strip().lower(), DEFAULT_LANGUAGE_CODE)


def resume_digest(skills: List[str], experience_summary: str) -> str:
    return ", ".join(skill.strip() for skill in skills if skill.strip()) + "\n\n" + experience_summary.strip()


def build_session_context(
    prep: PreparationData,
    *,
    modality: Modality = "text",
    visual_enabled: bool = False,
    session_id: Optional[str] = None,
) -> SessionContext:
    """Create the read-only context for one interview from preparation data."""

    fields = dict(
        job_role=prep.job_role,
        company=prep.company,
        resume_text=resume_digest(prep.skills, prep.experience_summary),
        language=prep.language,
        language_code=language_code_for(prep.language),
        modality=modality,
        visual_enabled=visual_enabled and modality == "voice",
        candidate_name=prep.candidate_name,
    )
    if session_id:
        fields["session_id"] = session_id
    return SessionContext(**fields)


def default_store() -> SqliteSessionStore:
    return SqliteSessionStore(Path(settings.DB_PATH))


def save_context(store: SessionStore, context: SessionContext) -> None:
    store.put(context_key(context.session_id), context.model_dump_json())


def load_context(store: SessionStore, session_id: str) -> Optional[SessionContext]:
    blob = store.get(context_key(session_id))
    if blob is None:
        return None
    return SessionContext.model_validate_json(blob)


def load_summary(store: SessionStore, session_id: str) -> Optional[LedgerSnapshot]:
    """Read back the ledger persisted when the session finished."""

    blob = store.get(summary_key(session_id))
    if blob is None:
        return None
    return LedgerSnapshot.model_validate_json(blob)


def open_session(store: SessionStore, session_id: str, **collaborators) -> InterviewSession:
    """Construct a session from the context stored at setup time."""

    context = load_context(store, session_id)
    if context is None:
        raise SessionNotFoundError(session_id)
    return InterviewSession(context, store=store, **collaborators)


class SessionRegistry:  # Live sessions owned by one process
    def __init__(self) -> None:
        self._sessions: Dict[str, InterviewSession] = {}

    def add(self, session: InterviewSession) -> None:
        self._sessions[session.session_id] = session

    def get(self, session_id: str) -> InterviewSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


__all__ = [
    "LANGUAGE_CODES",
    "PreparationData",
    "SessionNotFoundError",
    "SessionRegistry",
    "build_session_context",
    "default_store",
    "language_code_for",
    "load_context",
    "load_summary",
    "open_session",
    "resume_digest",
    "save_context",
]
