"""Conversation state machine for one mock-interview session.

``InterviewSession`` owns the turn loop: it presents a question, collects an
answer from the capture collaborator or the answer box, hands it to the
interview agent and either loops or finishes. Every external callback maps to
one handler method, so the whole loop can be driven by synthetic events.

All handlers run on a single asyncio event loop. The agent call inside
``submit`` is the only await, and ``thinking`` guarantees at most one call is
in flight.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from agents import ice_breaker as ice_breaker_agent
from agents import interview_agent
from agents.interview_agent import AgentInvocationError
from agents.types import AgentInput, AgentOutput, Feedback, decode_image_data_uri
from config.settings import settings
from llm_gateway import AllCredentialsFailedError, LlmGatewayError
from observability import log_event, span
from session_reports.store import SessionStore, summary_key

from .collaborators import InputCapture, OutputRenderer, SnapshotProvider
from .gate import GateDecision, SilenceTimer, SubmissionGate
from .ledger import SessionLedger
from .models import ConversationState, Notice, NoticeKind, SessionContext, Turn

logger = logging.getLogger(__name__)

AgentFn = Callable[[AgentInput], Awaitable[AgentOutput]]
IceBreakerFn = Callable[[Optional[str], str, str], Awaitable[str]]

State = ConversationState


class InterviewSession:
    def __init__(
        self,
        context: SessionContext,
        *,
        store: SessionStore,
        capture: Optional[InputCapture] = None,
        renderer: Optional[OutputRenderer] = None,
        snapshots: Optional[SnapshotProvider] = None,
        agent: Optional[AgentFn] = None,
        ice_breaker: Optional[IceBreakerFn] = None,
        silence_window_s: Optional[float] = None,
        opening_question: Optional[str] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
        on_finished: Optional[Callable[["InterviewSession"], None]] = None,
    ) -> None:
        self.context = context
        self.store = store
        self.capture = capture
        self.renderer = renderer
        self.snapshots = snapshots if context.visual_enabled else None
        self._agent: AgentFn = agent or interview_agent.run
        self._ice_breaker: IceBreakerFn = ice_breaker or ice_breaker_agent.run
        self.opening_question = opening_question or settings.OPENING_QUESTION
        self._on_notice = on_notice
        self._on_finished = on_finished

        window = silence_window_s if silence_window_s is not None else settings.SILENCE_WINDOW_SECONDS
        self.silence_timer = SilenceTimer(window, self._on_silence)
        self.gate = SubmissionGate(self.silence_timer)

        self.state = State.LOADING
        self.transcript = ""
        self.interim_transcript = ""
        self.current_question = ""
        self.feedback: Optional[Feedback] = None
        self.closing_remark: Optional[str] = None
        self.ledger = SessionLedger(context.session_id)
        self.notices: List[Notice] = []
        self.events: List[Dict[str, Any]] = []

        self._listening_intent = False
        self._persisted = False
        self._tasks: Set[asyncio.Future] = set()

    # ------------------------------------------------------------------ #
    # Read-only views
    # ------------------------------------------------------------------ #
    @property
    def session_id(self) -> str:
        return self.context.session_id

    @property
    def listening_intent(self) -> bool:
        return self._listening_intent

    @property
    def is_finished(self) -> bool:
        return self.state is State.FINISHED

    # ------------------------------------------------------------------ #
    # Opening
    # ------------------------------------------------------------------ #
    async def start(self) -> str:
        """Produce the opening question and present it."""

        if self.state is not State.LOADING:
            raise RuntimeError(f"Session {self.session_id} already started")
        log_event("session_started", self.session_id, modality=self.context.modality)

        question = self.opening_question
        if self.context.is_voice and self.snapshots is not None:
            question = await self._ice_breaker_question() or question

        if self.state is State.FINISHED:
            return question
        self._present(question)
        return question

    async def _ice_breaker_question(self) -> Optional[str]:
        snapshot = self._take_snapshot()
        if snapshot is None:
            log_event("ice_breaker", self.session_id, outcome="no_snapshot")
            return None
        try:
            with span(self, "ice_breaker"):
                question = await self._ice_breaker(self.context.candidate_name, snapshot, self.context.language)
        except (LlmGatewayError, AgentInvocationError, ValueError) as exc:
            logger.warning("Ice-breaker failed for session %s: %s", self.session_id, exc)
            log_event("ice_breaker", self.session_id, level=logging.WARNING, outcome="fallback", error=str(exc))
            return None
        log_event("ice_breaker", self.session_id, outcome="ok")
        return question

    # ------------------------------------------------------------------ #
    # Presenting questions
    # ------------------------------------------------------------------ #
    def _present(self, question: str) -> None:
        self.current_question = question
        if self.context.is_voice:
            self._transition(State.SPEAKING, reason="question")
            self._speak(question)
        else:
            self.transcript = ""
            self._transition(State.IDLE, reason="question")

    def _speak(self, text: str) -> None:
        if self.renderer is None:
            self.on_render_complete()
            return
        try:
            self.renderer.render(text, self.context.language_code, self.on_render_complete)
        except Exception as exc:
            self.on_render_complete(exc)

    def on_render_complete(self, error: Optional[Exception] = None) -> None:
        """Renderer callback; a failed render still advances the loop."""

        if error is not None:
            logger.warning("Render failed for session %s: %s", self.session_id, error)
            log_event("render_error", self.session_id, level=logging.WARNING, error=str(error))
        if self.state is not State.SPEAKING:
            return
        self._enter_listening()

    def _enter_listening(self) -> None:
        self.transcript = ""
        self.interim_transcript = ""
        self.feedback = None
        self._listening_intent = True
        self._transition(State.LISTENING)
        self._start_capture()

    # ------------------------------------------------------------------ #
    # Input capture
    # ------------------------------------------------------------------ #
    def on_transcript(self, text: str, is_final: bool = True) -> None:
        if self.state in (State.LOADING, State.SPEAKING, State.FINISHED):
            return
        if is_final:
            chunk = text.strip()
            if chunk:
                self.transcript = f"{self.transcript} {chunk}".strip()
            self.interim_transcript = ""
        else:
            self.interim_transcript = text
        if self.state is State.LISTENING and self.context.is_voice:
            self.silence_timer.arm()

    def update_transcript(self, text: str) -> bool:
        """Replace the answer with the user's edit. Only accepted while awaiting an answer."""

        if self.state not in (State.LISTENING, State.IDLE):
            return False
        self.transcript = text
        if self.state is State.LISTENING and self.context.is_voice:
            self.silence_timer.arm()
        return True

    def on_capture_ended(self) -> None:
        if self._listening_intent and self.state is State.LISTENING:
            log_event("capture_restarted", self.session_id)
            self._start_capture()

    def on_capture_error(self, message: str) -> None:
        self._listening_intent = False
        self._notify("input", "Microphone unavailable", message)

    def _start_capture(self) -> None:
        if self.capture is None:
            return
        try:
            self.capture.start()
        except Exception as exc:
            self.on_capture_error(str(exc))

    def _stop_capture(self) -> None:
        self._listening_intent = False
        if self.capture is None:
            return
        try:
            self.capture.stop()
        except Exception as exc:
            logger.warning("Capture stop failed for session %s: %s", self.session_id, exc)

    def _take_snapshot(self) -> Optional[str]:
        if self.snapshots is None:
            return None
        try:
            snapshot = self.snapshots.capture()
        except Exception as exc:
            logger.warning("Snapshot unavailable for session %s: %s", self.session_id, exc)
            return None
        if not snapshot:
            return None
        try:
            decode_image_data_uri(snapshot)
        except ValueError as exc:
            logger.warning("Discarding unreadable snapshot for session %s: %s", self.session_id, exc)
            return None
        return snapshot

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #
    async def submit(self) -> GateDecision:
        """Hand the current transcript to the agent if the gate accepts it."""

        decision = self.gate.check(self.transcript, self.state)
        if not decision.accepted:
            if decision.reason == "empty":
                self._notify("input", "No answer yet", "Please provide an answer before submitting.")
            log_event("submission_rejected", self.session_id, reason=decision.reason)
            return decision

        self._transition(State.THINKING, reason="submit")
        self._stop_capture()
        question = self.current_question
        snapshot = self._take_snapshot()

        try:
            agent_input = AgentInput(
                job_role=self.context.job_role,
                company=self.context.company,
                resume_text=self.context.resume_text,
                language=self.context.language,
                conversation_history=self.ledger.history(),
                current_transcript=decision.answer,
                visual_snapshot=snapshot,
            )
            with span(self, "agent_call"):
                output = await self._agent(agent_input)
        except Exception as exc:
            if self.state is State.THINKING:
                self._recover(exc)
            else:
                log_event("agent_result_discarded", self.session_id, outcome="error", error=str(exc))
            return decision

        if self.state is not State.THINKING:
            log_event("agent_result_discarded", self.session_id, outcome="late")
            return decision
        self._apply(question, decision.answer, snapshot, output)
        return decision

    def _apply(self, question: str, answer: str, snapshot: Optional[str], output: AgentOutput) -> None:
        if output.is_end_command():
            log_event("agent_reply", self.session_id, outcome="end_command")
            self._finish(output.next_question, reason="end_command")
            return

        feedback = output.feedback(with_visual=snapshot is not None)
        self.ledger.append(Turn(question=question, answer=answer, feedback=feedback, snapshot=snapshot))
        self.feedback = feedback
        scores = feedback.scoring.scores() if feedback.scoring else []
        log_event(
            "agent_reply",
            self.session_id,
            outcome="over" if output.is_interview_over else "next",
            turns=len(self.ledger),
            score=(sum(scores) / len(scores)) if scores else None,
        )
        if output.is_interview_over:
            self._finish(output.next_question, reason="agent_concluded")
        else:
            self._present(output.next_question)

    def _recover(self, exc: Exception) -> None:
        logger.warning("Agent call failed for session %s: %s", self.session_id, exc)
        self._notify("service", "Could not get feedback", _describe_failure(exc))
        if self.context.is_voice:
            self._listening_intent = True
            self._transition(State.LISTENING, reason="agent_error")
            self._start_capture()
        else:
            self._transition(State.IDLE, reason="agent_error")

    def _on_silence(self) -> None:
        if self.state is not State.LISTENING:
            return
        log_event("silence_timeout", self.session_id)
        task = asyncio.ensure_future(self.submit())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def settle(self) -> None:
        """Wait for submissions started by the silence timer."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------ #
    # Termination
    # ------------------------------------------------------------------ #
    def end(self) -> None:
        """User action: stop the interview now, even mid-call."""
        if self.state is State.FINISHED:
            return
        self._finish(None, reason="user_end")

    def _finish(self, closing_remark: Optional[str], *, reason: str) -> None:
        if self.state is State.FINISHED:
            return
        self.silence_timer.cancel()
        self._stop_capture()
        self.closing_remark = closing_remark
        self._transition(State.FINISHED, reason=reason)
        self.ledger.seal()
        self._persist()
        if closing_remark and self.context.is_voice:
            self._speak(closing_remark)
        if self._on_finished is not None:
            self._on_finished(self)

    def _persist(self) -> None:
        if self._persisted:
            return
        self._persisted = True
        try:
            self.store.put(summary_key(self.session_id), self.ledger.to_json())
        except (sqlite3.Error, OSError) as exc:
            logger.error("Failed to persist summary for session %s: %s", self.session_id, exc)
            self._notify("storage", "Could not save interview summary", str(exc))
            return
        log_event(
            "summary_persisted",
            self.session_id,
            turns=len(self.ledger),
            score=self.ledger.aggregate_score(),
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _transition(self, to_state: ConversationState, *, reason: Optional[str] = None) -> None:
        from_state = self.state
        self.state = to_state
        log_event(
            "state_transition",
            self.session_id,
            from_state=from_state.value,
            to_state=to_state.value,
            reason=reason,
        )

    def _notify(self, kind: NoticeKind, title: str, message: str) -> None:
        notice = Notice(kind=kind, title=title, message=message)
        self.notices.append(notice)
        log_event("notice", self.session_id, level=logging.WARNING, reason=kind, outcome=title)
        if self._on_notice is not None:
            self._on_notice(notice)


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, AllCredentialsFailedError):
        return "The interview service is busy right now. Please try again in a moment."
    if isinstance(exc, AgentInvocationError):
        return "The interviewer gave an unreadable reply. Please submit your answer again."
    if isinstance(exc, LlmGatewayError):
        return "The interview service could not be reached. Please try again."
    return "Something went wrong while processing your answer. Please try again."


__all__ = ["InterviewSession"]
