"""Ice-breaker opener generated from a camera still and the candidate's name."""
from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from agents.interview_agent import AgentInvocationError, resolve
from agents.types import IceBreakerOut, decode_image_data_uri
from config.registry import ICE_BREAKER_KEY, get_model


def build_task(candidate_name: Optional[str], language: str) -> str:
    greeting = f"Greet the candidate by name ({candidate_name})." if candidate_name else "Greet the candidate warmly."
    return "\n".join(
        [
            "You are a friendly, professional AI interview coach opening a mock interview.",
            f"All output must be in {language}.",
            greeting,
            "Make one brief, positive observation about their environment, attire or apparent confidence in the attached frame.",
            "Do not be personal or intrusive.",
            "Finish by asking whether they are ready to begin. Return one smooth message in the question field.",
        ]
    )


async def run(candidate_name: Optional[str], snapshot: str, language: str) -> str:
    """Return a single ice-breaker message for the opening turn."""

    decode_image_data_uri(snapshot)
    llm = get_model(ICE_BREAKER_KEY)
    raw = await resolve(llm(task=build_task(candidate_name, language), images=[snapshot], schema=IceBreakerOut))
    if isinstance(raw, IceBreakerOut):
        return raw.question
    try:
        return IceBreakerOut.model_validate(raw).question
    except ValidationError as exc:
        raise AgentInvocationError("Ice-breaker returned an invalid response") from exc


__all__ = ["build_task", "run"]
