import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.settings import settings
from config.registry import AGENT_KEY, ICE_BREAKER_KEY, bind_model, unbind_model

PNG_URI = "data:image/png;base64,aGVsbG8gd29ybGQ="


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    try:
        yield db_path
    finally:
        td.cleanup()


def agent_reply(
    next_question: str = "What was the hardest bug you fixed?",
    *,
    over: bool = False,
    score: Optional[int] = 7,
    feedback: bool = True,
) -> Dict[str, Any]:
    """Camel-case agent payload as the model returns it."""
    if not feedback:
        return {"nextQuestion": next_question, "isInterviewOver": over}
    reply: Dict[str, Any] = {
        "contentFeedback": "Relevant example.",
        "toneFeedback": "Confident.",
        "clarityFeedback": "Easy to follow.",
        "visualFeedback": "Good eye contact.",
        "nextQuestion": next_question,
        "isInterviewOver": over,
    }
    if score is not None:
        reply["scoring"] = {
            "ideas": {"score": score, "justification": "Clear main point."},
            "grammar": {"score": score, "justification": "Few slips."},
        }
    return reply


class ScriptedModel:  # Registry binding that replays queued replies
    def __init__(self) -> None:
        self.replies: List[Any] = []
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *replies: Any) -> "ScriptedModel":
        self.replies.extend(replies)
        return self

    async def __call__(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


class FakeCapture:
    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.running = False
        self.on_stop = None

    def start(self) -> None:
        self.starts += 1
        self.running = True

    def stop(self) -> None:
        self.stops += 1
        self.running = False
        if self.on_stop is not None:
            self.on_stop()


class FakeRenderer:
    def __init__(self) -> None:
        self.rendered: List[tuple] = []
        self._pending = None

    def render(self, text, language_code, on_done) -> None:
        self.rendered.append((text, language_code))
        self._pending = on_done

    def complete(self, error: Optional[Exception] = None) -> None:
        on_done, self._pending = self._pending, None
        on_done(error)


class FakeSnapshots:
    def __init__(self, value: Optional[str] = PNG_URI) -> None:
        self.value = value
        self.captures = 0

    def capture(self) -> Optional[str]:
        self.captures += 1
        return self.value


@pytest.fixture
def scripted_agent():
    model = ScriptedModel()
    bind_model(AGENT_KEY, model)
    try:
        yield model
    finally:
        unbind_model(AGENT_KEY)


@pytest.fixture
def scripted_ice_breaker():
    model = ScriptedModel()
    bind_model(ICE_BREAKER_KEY, model)
    try:
        yield model
    finally:
        unbind_model(ICE_BREAKER_KEY)


@pytest.fixture
def reply():
    return agent_reply


@pytest.fixture
def capture():
    return FakeCapture()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def snapshots():
    return FakeSnapshots()


@pytest.fixture
def png_uri():
    return PNG_URI
