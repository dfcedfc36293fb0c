from __future__ import annotations  # Submission guard and voice-mode silence timer

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from .models import ConversationState

_BLOCKED = {
    ConversationState.THINKING: "busy",
    ConversationState.FINISHED: "finished",
    ConversationState.SPEAKING: "speaking",
    ConversationState.LOADING: "loading",
}


@dataclass(frozen=True)
class GateDecision:  # Outcome of one submission attempt
    accepted: bool
    answer: str = ""
    reason: Optional[str] = None


class SilenceTimer:  # One-shot timer armed on each transcript chunk
    def __init__(self, window_s: float, callback: Callable[[], None]) -> None:
        if window_s <= 0:
            raise ValueError("silence window must be positive")
        self.window_s = window_s
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.window_s, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class SubmissionGate:
    """Decides whether an answer may be handed to the agent.

    Every attempt cancels the pending silence timer, whether or not the
    answer is accepted.
    """

    def __init__(self, timer: Optional[SilenceTimer] = None) -> None:
        self.timer = timer

    def check(self, answer: str, state: ConversationState) -> GateDecision:
        if self.timer is not None:
            self.timer.cancel()
        reason = _BLOCKED.get(state)
        if reason is not None:
            return GateDecision(False, reason=reason)
        trimmed = (answer or "").strip()
        if not trimmed:
            return GateDecision(False, reason="empty")
        return GateDecision(True, answer=trimmed)


__all__ = ["GateDecision", "SilenceTimer", "SubmissionGate"]
