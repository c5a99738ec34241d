from __future__ import annotations

from typing import Any

import pytest

from hirepipeline.core.evaluators.screening import ScreeningConfig, ScreeningEvaluator
from hirepipeline.errors import NotFoundError
from hirepipeline.schemas import Answer, Question, RoundStatus, ScreeningRound
from hirepipeline.stores import InMemoryCatalog


def build_question(question_id: str, acceptable: list[str] | None, **kwargs: Any) -> Question:
    return Question(
        question_id=question_id,
        type="screening",
        acceptable_answers=acceptable,
        **kwargs,
    )


def build_evaluator(questions: list[Question], config: ScreeningConfig | None = None) -> ScreeningEvaluator:
    return ScreeningEvaluator(InMemoryCatalog(questions=questions), config=config)


def answers(*pairs: tuple[str, str]) -> list[Answer]:
    return [Answer(question_id=qid, answer=value) for qid, value in pairs]


def test_wrong_strict_answer_fails_without_score():
    evaluator = build_evaluator([build_question("q1", ["B"], is_strict=True)])
    round_ = ScreeningRound(id=0, question_ids=["q1"])

    outcome = evaluator.evaluate(round_, answers(("q1", "A")))

    assert outcome.status == RoundStatus.FAILED
    assert outcome.score is None
    assert outcome.metadata["failed_strict"] is True
    assert outcome.metadata["failed_question_id"] == "q1"


def test_non_strict_questions_score_percentage():
    questions = [build_question(f"q{i}", ["yes"]) for i in range(1, 5)]
    evaluator = build_evaluator(questions)
    round_ = ScreeningRound(id=0, question_ids=[q.question_id for q in questions])

    outcome = evaluator.evaluate(
        round_,
        answers(("q1", "yes"), ("q2", "yes"), ("q3", "no"), ("q4", "yes")),
    )

    assert outcome.status == RoundStatus.PASSED
    assert outcome.score == 75


def test_strict_failure_stops_evaluation_at_first_strict_miss():
    questions = [
        build_question("q1", ["yes"]),
        build_question("q2", ["yes"], is_strict=True),
        build_question("q3", ["yes"]),
        build_question("q4", ["yes"], is_strict=True),
    ]
    evaluator = build_evaluator(questions)
    round_ = ScreeningRound(id=0, question_ids=["q1", "q2", "q3", "q4"])

    outcome = evaluator.evaluate(
        round_,
        answers(("q1", "yes"), ("q2", "no"), ("q3", "yes"), ("q4", "no")),
    )

    assert outcome.status == RoundStatus.FAILED
    assert outcome.metadata["correct"] == 1
    assert outcome.metadata["failed_question_id"] == "q2"


def test_wrong_lenient_answer_only_lowers_score():
    questions = [build_question("q1", ["yes"]), build_question("q2", ["yes"])]
    evaluator = build_evaluator(questions)
    round_ = ScreeningRound(id=0, question_ids=["q1", "q2"])

    outcome = evaluator.evaluate(round_, answers(("q1", "no"), ("q2", "no")))

    assert outcome.status == RoundStatus.PASSED
    assert outcome.score == 0


def test_zero_questions_scores_zero():
    evaluator = build_evaluator([])

    outcome = evaluator.evaluate(ScreeningRound(id=0), [])

    assert outcome.status == RoundStatus.PASSED
    assert outcome.score == 0


def test_question_without_acceptable_answers_is_skipped_but_counted_in_total():
    questions = [build_question("q1", None, is_strict=True), build_question("q2", ["5+"])]
    evaluator = build_evaluator(questions)
    round_ = ScreeningRound(id=0, question_ids=["q1", "q2"])

    outcome = evaluator.evaluate(round_, answers(("q1", "anything"), ("q2", "5+")))

    assert outcome.status == RoundStatus.PASSED
    assert outcome.score == 50
    assert outcome.metadata["skipped"] == ["q1"]


def test_answers_to_unknown_questions_are_ignored():
    evaluator = build_evaluator([build_question("q1", ["yes"], is_strict=True)])
    round_ = ScreeningRound(id=0, question_ids=["q1"])

    outcome = evaluator.evaluate(round_, answers(("other", "no"), ("q1", "yes")))

    assert outcome.score == 100


def test_missing_round_question_raises_not_found():
    evaluator = build_evaluator([build_question("q1", ["yes"])])
    round_ = ScreeningRound(id=0, question_ids=["q1", "missing"])

    with pytest.raises(NotFoundError) as exc:
        evaluator.evaluate(round_, answers(("q1", "yes")))
    assert exc.value.identifier == "missing"


def test_normalize_matches_case_and_whitespace():
    evaluator = build_evaluator(
        [build_question("q1", ["Yes"], is_strict=True)],
        ScreeningConfig(normalize=True),
    )
    round_ = ScreeningRound(id=0, question_ids=["q1"])

    outcome = evaluator.evaluate(round_, answers(("q1", "  yes ")))

    assert outcome.status == RoundStatus.PASSED
    assert outcome.score == 100


def test_fuzzy_threshold_applies_to_lenient_questions_only():
    questions = [
        build_question("lenient", ["senior python developer"]),
        build_question("strict", ["senior python developer"], is_strict=True),
    ]
    evaluator = build_evaluator(questions, ScreeningConfig(fuzzy_threshold=90))
    round_ = ScreeningRound(id=0, question_ids=["lenient", "strict"])

    lenient_only = evaluator.evaluate(
        round_,
        answers(("lenient", "Python Developer"), ("strict", "senior python developer")),
    )
    strict_fuzzy = evaluator.evaluate(round_, answers(("strict", "Python Developer")))

    assert lenient_only.score == 100
    assert strict_fuzzy.status == RoundStatus.FAILED
