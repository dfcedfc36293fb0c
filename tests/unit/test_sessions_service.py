import pytest

from interview_session.interview_session import InterviewSession
from services.sessions import (
    PreparationData,
    SessionNotFoundError,
    SessionRegistry,
    build_session_context,
    default_store,
    language_code_for,
    load_context,
    open_session,
    save_context,
)


@pytest.mark.parametrize(
    "language,code",
    [
        ("English", "en-US"),
        ("Spanish", "es-ES"),
        ("French", "fr-FR"),
        ("German", "de-DE"),
        ("Hindi", "hi-IN"),
        ("Hinglish", "en-IN"),
        ("hinglish ", "en-IN"),
        ("Klingon", "en-US"),
    ],
)
def test_language_code_mapping(language, code):
    assert language_code_for(language) == code


def _prep(**overrides):
    data = dict(
        job_role="QA Engineer",
        company="Initech",
        language="French",
        skills=["Selenium", " Pytest "],
        experience_summary="Automated regression suites.",
        candidate_name="Lea",
    )
    data.update(overrides)
    return PreparationData(**data)


def test_context_from_preparation_data():
    context = build_session_context(_prep(), modality="voice", visual_enabled=True, session_id="abc")
    assert context.session_id == "abc"
    assert context.resume_text == "Selenium, Pytest\n\nAutomated regression suites."
    assert context.language_code == "fr-FR"
    assert context.is_voice and context.visual_enabled


def test_text_mode_never_enables_visual():
    context = build_session_context(_prep(), modality="text", visual_enabled=True)
    assert not context.visual_enabled


def test_context_round_trips_through_store():
    store = default_store()
    context = build_session_context(_prep())
    save_context(store, context)
    assert load_context(store, context.session_id) == context
    assert load_context(store, "missing") is None


def test_open_session_reads_stored_context():
    store = default_store()
    context = build_session_context(_prep())
    save_context(store, context)
    session = open_session(store, context.session_id)
    assert isinstance(session, InterviewSession)
    assert session.context == context
    with pytest.raises(SessionNotFoundError):
        open_session(store, "missing")


def test_registry_lookup():
    registry = SessionRegistry()
    session = InterviewSession(build_session_context(_prep()), store=default_store())
    registry.add(session)
    assert registry.get(session.session_id) is session
    registry.discard(session.session_id)
    with pytest.raises(SessionNotFoundError):
        registry.get(session.session_id)
