"""Aggregate scoring over the turns of one interview."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from agents.types import SCORING_CATEGORIES
from interview_session.models import Turn


def _round1(value: float) -> float:
    """Round a float to one decimal place with stable formatting."""
    return float(f"{value:.1f}")


def aggregate_score(turns: Iterable[Turn]) -> Optional[float]:
    """Mean of every present category score across all turns.

    Each present category counts once in the denominator. Returns ``None``
    when no turn carries a score.
    """

    values: List[int] = []
    for turn in turns:
        scoring = turn.feedback.scoring
        if scoring is not None:
            values.extend(scoring.scores())
    if not values:
        return None
    return sum(values) / len(values)


def category_averages(turns: Iterable[Turn]) -> Dict[str, float]:
    """Per-category means, rounded for display; categories never scored are omitted."""

    buckets: Dict[str, List[int]] = {name: [] for name in SCORING_CATEGORIES}
    for turn in turns:
        scoring = turn.feedback.scoring
        if scoring is None:
            continue
        for name, item in scoring.present().items():
            buckets[name].append(item.score)
    return {name: _round1(sum(vals) / len(vals)) for name, vals in buckets.items() if vals}


__all__ = ["aggregate_score", "category_averages"]
