"""Round scorers."""

from .assessment import AssessmentScorer
from .screening import ScreeningConfig, ScreeningEvaluator

__all__ = [
    "AssessmentScorer",
    "ScreeningConfig",
    "ScreeningEvaluator",
]
