"""Normalized scorer output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol, Sequence, runtime_checkable

from ..schemas import Answer, RoundBase, RoundStatus


@dataclass(slots=True)
class RoundOutcome:
    """Result of automatically scoring one round submission."""

    method: str
    status: RoundStatus
    score: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def percentage(correct: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 when there is nothing to score."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def first_answers(answers: Iterable[Answer]) -> dict[str, str]:
    """Keep the first answer given for each question."""
    collected: dict[str, str] = {}
    for answer in answers:
        collected.setdefault(answer.question_id, answer.answer)
    return collected


@runtime_checkable
class RoundScorer(Protocol):
    """Scorer contract for automatically evaluated rounds."""

    method: str

    def evaluate(self, round_: RoundBase, answers: Sequence[Answer]) -> RoundOutcome:
        """Return the scored outcome for a submission to ``round_``."""
