"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from agents.types import Feedback
from interview_session.models import Notice, Turn


class StartReq(BaseModel):
    job_role: str
    company: str
    language: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    experience_summary: str = ""
    candidate_name: Optional[str] = None


class TurnReq(BaseModel):
    session_id: str
    answer: str


class FinishReq(BaseModel):
    session_id: str


class ApiResp(BaseModel):
    session_id: str
    state: str
    question: Optional[str] = None
    feedback: Optional[Feedback] = None
    closing_remark: Optional[str] = None
    accepted: Optional[bool] = None
    reason: Optional[str] = None
    turns: int = 0
    notices: List[Notice] = Field(default_factory=list)
    event_log: List[Dict] = Field(default_factory=list)


class SummaryResp(BaseModel):
    session_id: str
    sealed: bool
    turns: List[Turn] = Field(default_factory=list)
    aggregate_score: Optional[float] = None
    category_averages: Dict[str, float] = Field(default_factory=dict)
