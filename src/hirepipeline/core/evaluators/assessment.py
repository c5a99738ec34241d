"""Assessment scoring against stored correct answers."""

from __future__ import annotations

from typing import Sequence

from ...schemas import Answer, AssessmentRound, RoundStatus
from ...stores import AssessmentRepository, QuestionRepository
from ..outcome import RoundOutcome, first_answers, percentage


class AssessmentScorer:
    """Score multiple-choice answers and apply the round's pass threshold.

    Only ``mcq`` questions are auto-scored; other types count as zero and are
    reported in ``metadata["ungraded"]`` for human grading. Without a
    ``selection_criteria`` the result stays ``Pending``.
    """

    method = "assessment"

    def __init__(
        self,
        questions: QuestionRepository,
        assessments: AssessmentRepository,
    ) -> None:
        self._questions = questions
        self._assessments = assessments

    def evaluate(self, round_: AssessmentRound, answers: Sequence[Answer]) -> RoundOutcome:
        assessment = self._assessments.get_assessment(round_.assessment_id)
        question_ids = list(dict.fromkeys(assessment.question_ids))
        total = len(question_ids)

        allowed = set(question_ids)
        submitted = {
            question_id: value
            for question_id, value in first_answers(answers).items()
            if question_id in allowed
        }
        questions = self._questions.get_questions(list(submitted))

        correct = 0
        ungraded: list[str] = []
        for question_id, value in submitted.items():
            question = questions[question_id]
            if question.type != "mcq":
                ungraded.append(question_id)
                continue
            if question.correct_answer is not None and value == question.correct_answer:
                correct += 1

        score = percentage(correct, total)
        criteria = round_.selection_criteria
        if criteria is None:
            status = RoundStatus.PENDING
        elif score >= criteria:
            status = RoundStatus.PASSED
        else:
            status = RoundStatus.FAILED

        return RoundOutcome(
            method=self.method,
            status=status,
            score=score,
            metadata={
                "assessment_id": assessment.assessment_id,
                "correct": correct,
                "total": total,
                "answered": len(submitted),
                "ungraded": ungraded,
                "selection_criteria": criteria,
            },
        )
