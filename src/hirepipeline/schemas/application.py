"""Application state: a candidate's progress through one job."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ApplicationStatus(str, Enum):
    SUBMITTED = "Submitted"
    SCREENING_PASSED = "Screening Passed"
    SCREENING_FAILED = "Screening Failed"
    IN_PROGRESS = "In Progress"
    REJECTED = "Rejected"


class RoundStatus(str, Enum):
    PENDING = "Pending"
    PASSED = "Passed"
    FAILED = "Failed"


class ScheduleStatus(str, Enum):
    PENDING = "Pending"
    ATTEMPTED = "Attempted"


class Answer(BaseModel):
    """A candidate's answer to a single question."""

    question_id: str
    answer: str

    model_config = ConfigDict(extra="forbid", frozen=True)


class RoundFeedback(BaseModel):
    """Candidate feedback attached to a round result after the fact."""

    rating: int = Field(ge=0, le=5)
    comment: str = ""
    submitted_at: datetime

    model_config = ConfigDict(extra="forbid", frozen=True)


class RoundResult(BaseModel):
    """Outcome of one attempt at one round. Only ``feedback`` may change."""

    round_id: int
    status: RoundStatus
    answers: tuple[Answer, ...] = ()
    score: int | None = Field(default=None, ge=0, le=100)
    completed_at: datetime
    started_at: datetime | None = None
    time_taken: int | None = None
    feedback: RoundFeedback | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


class Schedule(BaseModel):
    """Deadline window for an upcoming round."""

    round_id: int
    scheduled_at: datetime
    due_date: datetime
    status: ScheduleStatus = ScheduleStatus.PENDING

    model_config = ConfigDict(extra="forbid", frozen=True)


class Application(BaseModel):
    """Immutable snapshot of one (job, candidate) application."""

    job_id: str
    candidate_id: str
    status: ApplicationStatus = ApplicationStatus.SUBMITTED
    active_round_index: int = Field(default=0, ge=0)
    round_results: tuple[RoundResult, ...] = ()
    schedules: tuple[Schedule, ...] = ()
    applied_at: datetime | None = None
    version: int = 0

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def application_id(self) -> str:
        return f"{self.job_id}:{self.candidate_id}"

    def result_for(self, round_id: int) -> RoundResult | None:
        for result in self.round_results:
            if result.round_id == round_id:
                return result
        return None
