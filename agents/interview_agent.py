"""Conversational interview agent: feedback, scoring and the next question."""
from __future__ import annotations

import inspect
import logging
from typing import Any, List

from pydantic import ValidationError

from agents.types import AgentInput, AgentOutput
from config.registry import AGENT_KEY, get_model
from config.settings import settings

logger = logging.getLogger(__name__)


class AgentInvocationError(RuntimeError):
    """The agent replied, but not with a usable structured answer."""


async def resolve(raw: Any) -> Any:
    """Await registry results produced by async bindings."""
    if inspect.isawaitable(raw):
        return await raw
    return raw


async def run(agent_input: AgentInput) -> AgentOutput:
    """Invoke the registry-bound agent for one submitted answer."""

    llm = get_model(AGENT_KEY)
    images = [agent_input.visual_snapshot] if agent_input.visual_snapshot else []
    raw = await resolve(llm(task=build_task(agent_input), images=images, schema=AgentOutput))
    if isinstance(raw, AgentOutput):
        return raw
    try:
        return AgentOutput.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Agent output rejected: %s", exc)
        raise AgentInvocationError("Agent returned an invalid response") from exc


def build_task(agent_input: AgentInput) -> str:  # Compose prompt for the interview agent
    sections: List[str] = [
        "You are a friendly, professional AI interview coach. Keep the interview a natural, flowing conversation.",
        f"The candidate is interviewing for the role of {agent_input.job_role} at {agent_input.company}.",
        "Their resume digest:\n---\n" + (agent_input.resume_text.strip() or "(no resume provided)") + "\n---",
        f"The interview is in {agent_input.language}. Every feedback field and question must be in {agent_input.language}.",
        "Conversation so far:\n" + _format_history(agent_input),
        f"Candidate's latest answer:\nCandidate: {agent_input.current_transcript}",
    ]
    if agent_input.visual_snapshot:
        sections.append("A still frame of the candidate taken as they finished answering is attached.")
    sections.append(_task_rules(agent_input))
    return "\n\n".join(sections)


def _format_history(agent_input: AgentInput) -> str:
    if not agent_input.conversation_history:
        return "(no previous exchanges)"
    lines: List[str] = []
    for item in agent_input.conversation_history:
        lines.append(f"Interviewer: {item.question}")
        lines.append(f"Candidate: {item.answer}")
    return "\n".join(lines)


def _task_rules(agent_input: AgentInput) -> str:
    if agent_input.visual_snapshot:
        visual_rule = "- visualFeedback: body language, eye contact and confidence as seen in the attached frame."
    else:
        visual_rule = "- visualFeedback: state that no video frame was provided."
    if agent_input.conversation_history:
        follow_up = "\n".join(
            [
                "- If the latest answer picks a focus area (behavioral, technical, resume deep-dive, company), acknowledge it and ask the first question from that area.",
                "- Otherwise ask one follow-up that builds on the latest answer.",
                "- Cross-check claims against the resume digest and gently probe any discrepancy.",
                "- Never repeat a question that already appears in the conversation.",
            ]
        )
    else:
        follow_up = (
            "- This is the first answer after the opener. Do not ask a real interview question yet: "
            "ask the candidate which area to focus on (behavioral, technical, resume deep-dive, or the company)."
        )
    exchanges = settings.TARGET_EXCHANGES
    return "\n".join(
        [
            "Tasks:",
            "1. End command: if the latest answer clearly asks to stop (\"end the interview\", \"I am done\"), "
            "set isInterviewOver to true, put a polite closing remark in nextQuestion and leave every feedback field empty with no scoring.",
            "2. Feedback (when not ending):",
            "- contentFeedback: substance of the answer and how it aligns with the resume.",
            "- toneFeedback: confident, hesitant, professional and so on.",
            "- clarityFeedback: how easy the answer was to follow.",
            visual_rule,
            "- scoring: rate ideas, organization, accuracy, voice, grammar and fillerWords from 1 to 10, "
            "each with a one-line justification.",
            "3. Next question (when not ending):",
            follow_up,
            f"4. After {exchanges} meaningful exchanges (the opener and the focus choice do not count), "
            "once you have a clear picture of the candidate, set isInterviewOver to true and give a friendly closing remark in nextQuestion.",
        ]
    )


__all__ = ["AgentInvocationError", "build_task", "resolve", "run"]
