"""Shared type definitions for agents."""
import base64
import binascii
import re
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SCORING_CATEGORIES = ("ideas", "organization", "accuracy", "voice", "grammar", "filler_words")

_DATA_URI = re.compile(r"^data:(?P<mime>image/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)


def _camel_config(**extra) -> ConfigDict:
    return ConfigDict(alias_generator=to_camel, populate_by_name=True, **extra)


def decode_image_data_uri(value: str) -> bytes:
    """Return the image bytes of a ``data:image/...;base64,`` URI or raise ValueError."""
    match = _DATA_URI.match(value.strip())
    if match is None:
        raise ValueError("snapshot must be a data:image/<type>;base64 URI")
    try:
        raw = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("snapshot payload is not valid base64") from exc
    if not raw:
        raise ValueError("snapshot payload is empty")
    return raw


class HistoryItem(BaseModel):
    question: str
    answer: str


class AgentInput(BaseModel):
    """Everything the interview agent sees for one turn."""

    model_config = _camel_config(frozen=True)

    job_role: str
    company: str
    resume_text: str
    language: str
    conversation_history: List[HistoryItem] = Field(default_factory=list)
    current_transcript: str
    visual_snapshot: Optional[str] = None

    @field_validator("current_transcript")
    @classmethod
    def _transcript_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("current transcript is empty")
        return value

    @field_validator("visual_snapshot")
    @classmethod
    def _snapshot_decodes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        decode_image_data_uri(value)
        return value


class CategoryScore(BaseModel):
    score: int = Field(ge=1, le=10)
    justification: str

    @field_validator("justification")
    @classmethod
    def _justified(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("score justification is empty")
        return value


class Scoring(BaseModel):
    """Six fixed rubric categories, each optional."""

    model_config = _camel_config(frozen=True)

    ideas: Optional[CategoryScore] = None
    organization: Optional[CategoryScore] = None
    accuracy: Optional[CategoryScore] = None
    voice: Optional[CategoryScore] = None
    grammar: Optional[CategoryScore] = None
    filler_words: Optional[CategoryScore] = None

    def present(self) -> Dict[str, CategoryScore]:
        found: Dict[str, CategoryScore] = {}
        for name in SCORING_CATEGORIES:
            item = getattr(self, name)
            if item is not None:
                found[name] = item
        return found

    def scores(self) -> List[int]:
        return [item.score for item in self.present().values()]


class Feedback(BaseModel):
    """Structured critique attached to a turn."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    tone: str = ""
    clarity: str = ""
    visual: Optional[str] = None
    scoring: Optional[Scoring] = None

    def has_critique(self) -> bool:
        """True when the answer itself was critiqued or scored."""
        texts = (self.content, self.tone, self.clarity)
        return any(text.strip() for text in texts) or bool(self.scoring and self.scoring.present())


class AgentOutput(BaseModel):
    """Structured reply from the interview agent."""

    model_config = _camel_config()

    content_feedback: str = ""
    tone_feedback: str = ""
    clarity_feedback: str = ""
    visual_feedback: str = ""
    scoring: Optional[Scoring] = None
    next_question: str
    is_interview_over: bool = False

    @field_validator("next_question")
    @classmethod
    def _question_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("nextQuestion is empty")
        return value

    def feedback(self, *, with_visual: bool) -> Feedback:
        visual = self.visual_feedback if with_visual and self.visual_feedback.strip() else None
        return Feedback(
            content=self.content_feedback,
            tone=self.tone_feedback,
            clarity=self.clarity_feedback,
            visual=visual,
            scoring=self.scoring if self.scoring and self.scoring.present() else None,
        )

    def is_end_command(self) -> bool:
        """True for the bare "stop the interview" reply.

        Visual feedback is ignored; the agent may fill it with a placeholder.
        """
        return self.is_interview_over and not self.feedback(with_visual=False).has_critique()


class IceBreakerOut(BaseModel):
    question: str

    @field_validator("question")
    @classmethod
    def _question_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("ice-breaker question is empty")
        return value
