"""Append-only record of the turns in one interview session."""
from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from agents.types import HistoryItem
from services.scoring import aggregate_score

from .models import Turn


class LedgerSealedError(RuntimeError):
    """Raised when appending to a ledger whose session has finished."""


class LedgerSnapshot(BaseModel):  # Serialized form persisted at session end
    session_id: str
    sealed: bool = False
    turns: List[Turn] = Field(default_factory=list)
    aggregate_score: Optional[float] = None


class SessionLedger:
    """Ordered turns of a session. ``append`` is the only mutator."""

    def __init__(self, session_id: str, turns: Sequence[Turn] = (), *, sealed: bool = False) -> None:
        self.session_id = session_id
        self._turns: List[Turn] = list(turns)
        self._sealed = sealed

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def append(self, turn: Turn) -> None:
        if self._sealed:
            raise LedgerSealedError(f"Ledger for session {self.session_id} is sealed")
        self._turns.append(turn)

    def seal(self) -> None:
        self._sealed = True

    def history(self) -> List[HistoryItem]:
        """Question/answer pairs in chronological order for the next agent call."""
        return [HistoryItem(question=turn.question, answer=turn.answer) for turn in self._turns]

    def aggregate_score(self) -> Optional[float]:
        return aggregate_score(self._turns)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            session_id=self.session_id,
            sealed=self._sealed,
            turns=list(self._turns),
            aggregate_score=self.aggregate_score(),
        )

    def to_json(self) -> str:
        return self.snapshot().model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> "SessionLedger":
        snap = LedgerSnapshot.model_validate_json(data)
        return cls(snap.session_id, snap.turns, sealed=snap.sealed)


__all__ = ["LedgerSealedError", "LedgerSnapshot", "SessionLedger"]
