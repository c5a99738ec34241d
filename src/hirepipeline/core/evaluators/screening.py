"""Screening questionnaire evaluation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from rapidfuzz import fuzz

from ...schemas import Answer, Question, RoundStatus, ScreeningRound
from ...stores import QuestionRepository
from ..outcome import RoundOutcome, first_answers, percentage


@dataclass
class ScreeningConfig:
    """Answer matching rules for screening questions."""

    normalize: bool = False
    # token_set_ratio threshold (0-100) for lenient questions; None disables fuzzy matching
    fuzzy_threshold: float | None = None


class ScreeningEvaluator:
    """Score a screening submission against acceptable answers.

    A wrong answer to a strict question fails the whole round immediately;
    remaining answers are not looked at and no score is produced.
    """

    method = "screening"

    def __init__(
        self,
        questions: QuestionRepository,
        *,
        config: ScreeningConfig | None = None,
    ) -> None:
        self._questions = questions
        self._config = config or ScreeningConfig()

    def evaluate(self, round_: ScreeningRound, answers: Sequence[Answer]) -> RoundOutcome:
        question_ids = list(dict.fromkeys(round_.question_ids))
        questions = self._questions.get_questions(question_ids)
        total = len(question_ids)

        correct = 0
        failed_question: str | None = None
        skipped: list[str] = []

        for question_id, value in first_answers(answers).items():
            question = questions.get(question_id)
            if question is None or question.acceptable_answers is None:
                skipped.append(question_id)
                continue
            if self._matches(question, value):
                correct += 1
            elif question.is_strict:
                failed_question = question_id
                break

        metadata = {
            "correct": correct,
            "total": total,
            "skipped": skipped,
            "failed_strict": failed_question is not None,
            "failed_question_id": failed_question,
        }
        if failed_question is not None:
            return RoundOutcome(method=self.method, status=RoundStatus.FAILED, metadata=metadata)

        return RoundOutcome(
            method=self.method,
            status=RoundStatus.PASSED,
            score=percentage(correct, total),
            metadata=metadata,
        )

    def _matches(self, question: Question, value: str) -> bool:
        acceptable = question.acceptable_answers or []
        if self._config.normalize:
            candidate = self._normalize(value)
            options = [self._normalize(option) for option in acceptable]
        else:
            candidate = value
            options = list(acceptable)

        if candidate in options:
            return True

        threshold = self._config.fuzzy_threshold
        if threshold is None or question.is_strict:
            return False
        lowered = candidate.lower()
        return any(fuzz.token_set_ratio(lowered, option.lower()) >= threshold for option in options)

    @staticmethod
    def _normalize(value: str) -> str:
        return " ".join(value.split()).casefold()
