import pytest

from agents.types import CategoryScore, Feedback, Scoring
from interview_session.ledger import LedgerSealedError, SessionLedger
from interview_session.models import Turn
from services.scoring import aggregate_score, category_averages


def _turn(question, answer, **scores):
    scoring = None
    if scores:
        scoring = Scoring(**{name: CategoryScore(score=value, justification="ok") for name, value in scores.items()})
    return Turn(question=question, answer=answer, feedback=Feedback(content="c", scoring=scoring))


def test_append_preserves_order_and_history():
    ledger = SessionLedger("s1")
    ledger.append(_turn("Q1", " A1 "))
    ledger.append(_turn("Q2", "A2"))
    assert [turn.question for turn in ledger] == ["Q1", "Q2"]
    assert [(item.question, item.answer) for item in ledger.history()] == [("Q1", "A1"), ("Q2", "A2")]


def test_sealed_ledger_rejects_append():
    ledger = SessionLedger("s1", [_turn("Q1", "A1")])
    ledger.seal()
    with pytest.raises(LedgerSealedError):
        ledger.append(_turn("Q2", "A2"))
    assert len(ledger) == 1


def test_json_round_trip_keeps_turns(png_uri):
    ledger = SessionLedger("s1")
    ledger.append(_turn("Q1", "A1", ideas=6, grammar=8))
    ledger.append(Turn(question="Q2", answer="A2", feedback=Feedback(visual="steady"), snapshot=png_uri))
    ledger.seal()

    restored = SessionLedger.from_json(ledger.to_json())
    assert restored.session_id == "s1"
    assert restored.sealed
    assert [t.model_dump() for t in restored] == [t.model_dump() for t in ledger]
    assert png_uri not in ledger.to_json()


def test_aggregate_is_mean_of_present_categories():
    turns = [_turn("Q1", "A1", ideas=6, grammar=8), _turn("Q2", "A2"), _turn("Q3", "A3", voice=3)]
    ledger = SessionLedger("s1", turns)
    assert ledger.aggregate_score() == pytest.approx((6 + 8 + 3) / 3)
    assert category_averages(turns) == {"ideas": 6.0, "voice": 3.0, "grammar": 8.0}


def test_aggregate_without_scores_is_none():
    assert SessionLedger("s1", [_turn("Q1", "A1")]).aggregate_score() is None
    assert aggregate_score([]) is None


def test_turn_requires_answer():
    with pytest.raises(ValueError):
        Turn(question="Q", answer="   ", feedback=Feedback())
