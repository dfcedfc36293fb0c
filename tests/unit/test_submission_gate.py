import asyncio

import pytest

from interview_session.gate import SilenceTimer, SubmissionGate
from interview_session.models import ConversationState as State


@pytest.mark.parametrize(
    "state,reason",
    [
        (State.THINKING, "busy"),
        (State.FINISHED, "finished"),
        (State.SPEAKING, "speaking"),
        (State.LOADING, "loading"),
    ],
)
def test_blocked_states(state, reason):
    decision = SubmissionGate().check("an answer", state)
    assert not decision.accepted
    assert decision.reason == reason


@pytest.mark.parametrize("answer", ["", "   ", "\n\t"])
def test_empty_answer_rejected(answer):
    decision = SubmissionGate().check(answer, State.LISTENING)
    assert not decision.accepted
    assert decision.reason == "empty"


def test_accepted_answer_is_trimmed():
    decision = SubmissionGate().check("  my answer ", State.IDLE)
    assert decision.accepted
    assert decision.answer == "my answer"


def test_every_attempt_cancels_timer():
    fired = []

    async def scenario():
        timer = SilenceTimer(0.01, lambda: fired.append(True))
        gate = SubmissionGate(timer)
        timer.arm()
        gate.check("", State.LISTENING)
        assert not timer.pending
        timer.arm()
        gate.check("ok", State.LISTENING)
        assert not timer.pending
        await asyncio.sleep(0.03)

    asyncio.run(scenario())
    assert fired == []


def test_timer_rearm_restarts_window():
    fired = []

    async def scenario():
        timer = SilenceTimer(0.05, lambda: fired.append(True))
        timer.arm()
        await asyncio.sleep(0.03)
        timer.arm()
        await asyncio.sleep(0.03)
        assert fired == []
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert fired == [True]


def test_timer_window_must_be_positive():
    with pytest.raises(ValueError):
        SilenceTimer(0, lambda: None)
