"""Pydantic schema definitions for jobs, questions and applications."""

from __future__ import annotations

from .application import (
    Answer,
    Application,
    ApplicationStatus,
    RoundFeedback,
    RoundResult,
    RoundStatus,
    Schedule,
    ScheduleStatus,
)
from .job import AiInterviewRound, AssessmentRound, Job, Round, RoundBase, ScreeningRound
from .question import Assessment, Question

__all__ = [
    "AiInterviewRound",
    "Answer",
    "Application",
    "ApplicationStatus",
    "Assessment",
    "AssessmentRound",
    "Job",
    "Question",
    "Round",
    "RoundBase",
    "RoundFeedback",
    "RoundResult",
    "RoundStatus",
    "Schedule",
    "ScheduleStatus",
    "ScreeningRound",
]
