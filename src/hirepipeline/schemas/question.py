"""Question bank records."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

QuestionType = Literal["mcq", "screening", "subjective", "code"]


class Question(BaseModel):
    """A question referenced by screening rounds or assessments."""

    question_id: str
    type: QuestionType
    text: str = ""
    options: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    acceptable_answers: list[str] | None = None
    is_strict: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)


class Assessment(BaseModel):
    """An ordered set of questions used by assessment rounds."""

    assessment_id: str
    name: str = ""
    question_ids: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)
