"""FastAPI routes for a text-mode interview session."""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from api.schemas import ApiResp, FinishReq, StartReq, SummaryResp, TurnReq
from config.settings import settings
from interview_session.gate import GateDecision
from interview_session.interview_session import InterviewSession
from interview_session.models import Notice
from services.scoring import category_averages
from services.sessions import (
    PreparationData,
    SessionNotFoundError,
    SessionRegistry,
    build_session_context,
    default_store,
    load_summary,
    save_context,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview-sessions")

live_sessions = SessionRegistry()


def _session_or_404(session_id: str) -> InterviewSession:
    try:
        return live_sessions.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="session not found") from None


def _forget(session: InterviewSession) -> None:  # Drop finished sessions from the live map
    live_sessions.discard(session.session_id)


def _resp(
    session: InterviewSession,
    *,
    notices: Optional[List[Notice]] = None,
    decision: Optional[GateDecision] = None,
) -> ApiResp:
    return ApiResp(
        session_id=session.session_id,
        state=session.state.value,
        question=None if session.is_finished else session.current_question,
        feedback=session.feedback,
        closing_remark=session.closing_remark,
        accepted=None if decision is None else decision.accepted,
        reason=None if decision is None else decision.reason,
        turns=len(session.ledger),
        notices=notices or [],
        event_log=list(session.events),
    )


@router.post("/start", response_model=ApiResp)
async def start(req: StartReq) -> ApiResp:
    prep = PreparationData(
        job_role=req.job_role,
        company=req.company,
        language=req.language or settings.DEFAULT_LANGUAGE,
        skills=req.skills,
        experience_summary=req.experience_summary,
        candidate_name=req.candidate_name,
    )
    context = build_session_context(prep, modality="text")
    store = default_store()
    save_context(store, context)
    session = InterviewSession(context, store=store, on_finished=_forget)
    live_sessions.add(session)
    await session.start()
    return _resp(session)


@router.post("/turn", response_model=ApiResp)
async def turn(req: TurnReq) -> ApiResp:
    session = _session_or_404(req.session_id)
    seen = len(session.notices)
    session.update_transcript(req.answer)
    decision = await session.submit()
    return _resp(session, notices=session.notices[seen:], decision=decision)


@router.post("/finish", response_model=ApiResp)
def finish(req: FinishReq) -> ApiResp:
    session = _session_or_404(req.session_id)
    seen = len(session.notices)
    session.end()
    return _resp(session, notices=session.notices[seen:])


@router.get("/{session_id}/summary", response_model=SummaryResp)
def summary(session_id: str) -> SummaryResp:
    snapshot = load_summary(default_store(), session_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="summary not found")
    return SummaryResp(
        session_id=snapshot.session_id,
        sealed=snapshot.sealed,
        turns=snapshot.turns,
        aggregate_score=snapshot.aggregate_score,
        category_averages=category_averages(snapshot.turns),
    )
