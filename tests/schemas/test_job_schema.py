from __future__ import annotations

import pytest
from pydantic import ValidationError

from hirepipeline.schemas import (
    AiInterviewRound,
    Application,
    AssessmentRound,
    Job,
    RoundResult,
    RoundStatus,
    ScreeningRound,
)


def test_rounds_are_parsed_by_type():
    job = Job.model_validate(
        {
            "job_id": "J1",
            "rounds": [
                {"id": 0, "type": "screening", "question_ids": ["q1"]},
                {"id": 7, "type": "assessment", "assessment_id": "A1", "selection_criteria": 60, "auto_proceed": True},
                {"id": 3, "type": "ai-interview", "ai_interview_id": "I1"},
            ],
        }
    )

    assert [type(round_) for round_ in job.rounds] == [ScreeningRound, AssessmentRound, AiInterviewRound]
    assert job.position_of(7) == 1
    assert job.position_of(3) == 2
    assert job.position_of(42) is None
    assert job.round_at(5) is None


def test_round_capabilities():
    screening = ScreeningRound(id=0)
    assessment = AssessmentRound(id=1, assessment_id="A1")
    interview = AiInterviewRound(id=2, ai_interview_id="I1")

    assert (screening.requires_scoring, screening.requires_schedule, screening.requires_question_bank) == (True, False, True)
    assert (assessment.requires_scoring, assessment.requires_schedule, assessment.requires_question_bank) == (True, True, True)
    assert (interview.requires_scoring, interview.requires_schedule, interview.requires_question_bank) == (False, False, False)


def test_duplicate_round_ids_are_rejected():
    with pytest.raises(ValidationError):
        Job(job_id="J1", rounds=[ScreeningRound(id=1), AssessmentRound(id=1, assessment_id="A1")])


def test_unknown_round_type_is_rejected():
    with pytest.raises(ValidationError):
        Job.model_validate({"job_id": "J1", "rounds": [{"id": 0, "type": "coding-challenge"}]})


def test_selection_criteria_must_be_a_percentage():
    with pytest.raises(ValidationError):
        AssessmentRound(id=1, assessment_id="A1", selection_criteria=120)


def test_application_is_immutable():
    application = Application(job_id="J1", candidate_id="C1")

    with pytest.raises(ValidationError):
        application.active_round_index = 3

    assert application.application_id == "J1:C1"


def test_result_lookup_by_round_id():
    result = RoundResult(round_id=5, status=RoundStatus.PASSED, completed_at="2025-01-01T00:00:00Z")
    application = Application(job_id="J1", candidate_id="C1", round_results=[result])

    assert application.result_for(5) == result
    assert application.result_for(0) is None
