"""Session-scoped data: context, turns, conversation state and notices."""
from __future__ import annotations

from enum import Enum
from typing import Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from agents.types import Feedback

Modality = Literal["voice", "text"]
NoticeKind = Literal["input", "service", "storage"]


class ConversationState(str, Enum):
    """What the interview loop is doing right now."""

    LOADING = "loading"
    SPEAKING = "speaking"
    LISTENING = "listening"
    THINKING = "thinking"
    IDLE = "idle"
    FINISHED = "finished"


class SessionContext(BaseModel):  # Read-only configuration for one interview
    model_config = ConfigDict(frozen=True)

    session_id: str = Field(default_factory=lambda: uuid4().hex)
    job_role: str
    company: str
    resume_text: str
    language: str = "English"
    language_code: str = "en-US"
    modality: Modality = "text"
    visual_enabled: bool = False
    candidate_name: Optional[str] = None

    @model_validator(mode="after")
    def _camera_needs_voice(self) -> "SessionContext":
        if self.visual_enabled and self.modality != "voice":
            raise ValueError("visual capture is only available in voice mode")
        return self

    @property
    def is_voice(self) -> bool:
        return self.modality == "voice"


class Turn(BaseModel):  # One question/answer/feedback exchange
    model_config = ConfigDict(frozen=True)

    question: str
    answer: str
    feedback: Feedback
    snapshot: Optional[str] = Field(default=None, exclude=True)

    @field_validator("answer")
    @classmethod
    def _answer_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("answer is empty")
        return value


class Notice(BaseModel):  # Non-fatal, user-visible message
    kind: NoticeKind
    title: str
    message: str = ""


__all__ = ["ConversationState", "Modality", "Notice", "NoticeKind", "SessionContext", "Turn"]
