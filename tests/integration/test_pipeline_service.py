from __future__ import annotations

from typing import Iterable

import pendulum
from dependency_injector import providers

from hirepipeline.container import create_container
from hirepipeline.pipeline import HiringPipeline
from hirepipeline.schemas import Assessment, AssessmentRound, Job, Question, ScreeningRound
from hirepipeline.stores import InMemoryCatalog

NOW = pendulum.datetime(2025, 2, 3, 8, 30, tz="UTC")


class TimingOutQuestions(InMemoryCatalog):
    def get_questions(self, question_ids: Iterable[str]) -> dict[str, Question]:
        raise TimeoutError("lookup timed out")


def build_catalog(catalog_cls: type[InMemoryCatalog] = InMemoryCatalog) -> InMemoryCatalog:
    return catalog_cls(
        jobs=[
            Job(
                job_id="J1",
                rounds=[
                    ScreeningRound(id=0, question_ids=["s1"]),
                    AssessmentRound(id=1, assessment_id="A1", selection_criteria=70, auto_proceed=True),
                    AssessmentRound(id=2, assessment_id="A1"),
                ],
            )
        ],
        questions=[
            Question(question_id="s1", type="screening", acceptable_answers=["B"], is_strict=True),
            *[
                Question(question_id=f"m{i}", type="mcq", correct_answer="a")
                for i in range(10)
            ],
        ],
        assessments=[Assessment(assessment_id="A1", question_ids=[f"m{i}" for i in range(10)])],
    )


def build_pipeline(catalog: InMemoryCatalog | None = None) -> HiringPipeline:
    container = create_container()
    container.catalog.override(providers.Object(catalog or build_catalog()))
    container.engine.add_kwargs(now_provider=lambda: NOW)
    container.schedule_generator.add_kwargs(now_provider=lambda: NOW)
    return container.pipeline()


def mcq(correct: int) -> list[dict[str, str]]:
    return [{"question_id": f"m{i}", "answer": "a" if i < correct else "b"} for i in range(10)]


def test_full_flow_returns_result_values():
    pipeline = build_pipeline()

    applied = pipeline.submit_application("J1", "cand-1", [{"question_id": "s1", "answer": "B"}])
    submitted = pipeline.submit_round_assessment(
        "J1", 1, "cand-1", mcq(8), started_at=NOW.subtract(minutes=10)
    )
    feedback = pipeline.submit_round_feedback("J1", 1, "cand-1", 4, "Clear instructions")

    assert applied.success and applied.status == "Screening Passed"
    assert applied.round_results[0]["score"] == 100
    assert submitted.success and submitted.status == "In Progress"
    assert submitted.active_round_index == 2
    assert submitted.schedule["round_id"] == 2
    assert submitted.schedule["due_date"].startswith("2025-02-05T08:30:00")
    assert submitted.round_results[1]["time_taken"] == 600
    assert feedback.success
    assert feedback.round_results[1]["feedback"]["rating"] == 4
    assert feedback.round_results[1]["score"] == 80


def test_strict_screening_failure_result():
    pipeline = build_pipeline()

    result = pipeline.submit_application("J1", "cand-1", [{"question_id": "s1", "answer": "A"}])

    assert result.success
    assert result.status == "Screening Failed"
    assert result.round_results[0]["status"] == "Failed"
    assert result.round_results[0]["score"] is None


def test_missing_identifiers_are_rejected_before_reads():
    pipeline = build_pipeline()

    result = pipeline.submit_round_assessment("", None, "cand-1", [])

    assert result.success is False
    assert result.error == "Missing required information."
    assert result.retryable is False


def test_round_zero_is_a_valid_identifier():
    pipeline = build_pipeline()
    pipeline.submit_application("J1", "cand-1", [{"question_id": "s1", "answer": "B"}])

    result = pipeline.submit_round_feedback("J1", 0, "cand-1", 5, "")

    assert result.success


def test_feedback_without_round_result_is_not_found():
    pipeline = build_pipeline()
    pipeline.submit_application("J1", "cand-1", [{"question_id": "s1", "answer": "B"}])

    result = pipeline.submit_round_feedback("J1", 2, "cand-1", 3, "")

    assert result.success is False
    assert result.error == "Round result not found."


def test_unknown_job_is_reported():
    pipeline = build_pipeline()

    result = pipeline.submit_application("nope", "cand-1", None)

    assert result.success is False
    assert result.error == "Job not found."


def test_malformed_answers_are_reported():
    pipeline = build_pipeline()

    result = pipeline.submit_application("J1", "cand-1", [{"question": "s1"}])

    assert result.success is False
    assert result.error == "Answers must be question_id/answer pairs."


def test_dependency_failure_is_retryable_and_writes_nothing():
    catalog = build_catalog(TimingOutQuestions)
    pipeline = build_pipeline(catalog)

    result = pipeline.submit_application("J1", "cand-1", [{"question_id": "s1", "answer": "B"}])
    retry = pipeline.submit_application("J1", "cand-1", None)

    assert result.success is False
    assert result.retryable is True
    assert retry.success and retry.duplicate is False
    assert retry.status == "Submitted"


def test_schedule_next_round_reports_round():
    pipeline = build_pipeline()
    pipeline.submit_application("J1", "cand-1", [{"question_id": "s1", "answer": "B"}])

    result = pipeline.schedule_next_round("J1", "cand-1")

    assert result.success
    assert result.round_type == "assessment"
    assert result.active_round_index == 1
    assert result.schedule["status"] == "Pending"
