"""Job and round definitions."""

from __future__ import annotations

from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RoundBase(BaseModel):
    """Fields and capabilities shared by every round type."""

    requires_scoring: ClassVar[bool] = False
    requires_schedule: ClassVar[bool] = False
    requires_question_bank: ClassVar[bool] = False

    id: int
    name: str = ""
    auto_proceed: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class ScreeningRound(RoundBase):
    """Screening questionnaire evaluated against acceptable answers."""

    requires_scoring: ClassVar[bool] = True
    requires_question_bank: ClassVar[bool] = True

    type: Literal["screening"] = "screening"
    question_ids: list[str] = Field(default_factory=list)


class AssessmentRound(RoundBase):
    """Scored assessment with an optional pass percentage."""

    requires_scoring: ClassVar[bool] = True
    requires_schedule: ClassVar[bool] = True
    requires_question_bank: ClassVar[bool] = True

    type: Literal["assessment"] = "assessment"
    assessment_id: str
    selection_criteria: int | None = Field(default=None, ge=0, le=100)


class AiInterviewRound(RoundBase):
    """AI interview; outcome is decided outside the engine."""

    type: Literal["ai-interview"] = "ai-interview"
    ai_interview_id: str


Round = Annotated[
    Union[ScreeningRound, AssessmentRound, AiInterviewRound],
    Field(discriminator="type"),
]


class Job(BaseModel):
    """A job and its canonical, ordered round list."""

    job_id: str
    company_id: str | None = None
    title: str | None = None
    rounds: list[Round] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _unique_round_ids(self) -> "Job":
        ids = [round_.id for round_ in self.rounds]
        if len(ids) != len(set(ids)):
            raise ValueError("round ids must be unique within a job")
        return self

    def position_of(self, round_id: int) -> int | None:
        for position, round_ in enumerate(self.rounds):
            if round_.id == round_id:
                return position
        return None

    def round_at(self, position: int) -> RoundBase | None:
        if 0 <= position < len(self.rounds):
            return self.rounds[position]
        return None
