"""Round progression engine components."""

from __future__ import annotations

from .evaluators import AssessmentScorer, ScreeningConfig, ScreeningEvaluator
from .outcome import RoundOutcome, RoundScorer, percentage
from .progression import RoundProgressionEngine, ScorerRegistry, Transition, coerce_answers
from .scheduling import ScheduleConfig, ScheduleGenerator

__all__ = [
    "AssessmentScorer",
    "RoundOutcome",
    "RoundProgressionEngine",
    "RoundScorer",
    "ScheduleConfig",
    "ScheduleGenerator",
    "ScorerRegistry",
    "ScreeningConfig",
    "ScreeningEvaluator",
    "Transition",
    "coerce_answers",
    "percentage",
]
