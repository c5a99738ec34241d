"""Submission entrypoints returning explicit result values."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterable

import structlog

from .core import RoundProgressionEngine, Transition, coerce_answers
from .errors import MissingIdentifierError, PipelineError


@dataclass(slots=True)
class SubmissionResult:
    """Outcome reported to submission callers."""

    success: bool
    error: str | None = None
    retryable: bool = False
    duplicate: bool = False
    status: str | None = None
    active_round_index: int | None = None
    round_results: list[dict[str, Any]] = field(default_factory=list)
    schedule: dict[str, Any] | None = None
    round_name: str | None = None
    round_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_transition(cls, transition: Transition) -> "SubmissionResult":
        application = transition.application
        return cls(
            success=True,
            duplicate=transition.duplicate,
            status=application.status.value,
            active_round_index=application.active_round_index,
            round_results=[
                result.model_dump(mode="json") for result in application.round_results
            ],
            schedule=(
                transition.schedule.model_dump(mode="json") if transition.schedule else None
            ),
            round_name=transition.round.name if transition.round else None,
            round_type=transition.round.type if transition.round else None,
        )

    @classmethod
    def from_error(cls, exc: PipelineError) -> "SubmissionResult":
        return cls(success=False, error=exc.message, retryable=exc.retryable)


class HiringPipeline:
    """Inbound submission API over the progression engine."""

    def __init__(self, *, engine: RoundProgressionEngine) -> None:
        self._engine = engine
        self._logger = structlog.get_logger(__name__)

    def submit_application(
        self,
        job_id: str,
        candidate_id: str,
        answers: Iterable[Any] | None = None,
    ) -> SubmissionResult:
        def run() -> Transition:
            _require(job_id=job_id, candidate_id=candidate_id)
            return self._engine.submit_application(job_id, candidate_id, coerce_answers(answers))

        return self._execute("submit_application", run, job_id=job_id, candidate_id=candidate_id)

    def submit_round_assessment(
        self,
        job_id: str,
        round_id: int | None,
        candidate_id: str,
        answers: Iterable[Any],
        started_at: datetime | None = None,
    ) -> SubmissionResult:
        def run() -> Transition:
            _require(job_id=job_id, round_id=round_id, candidate_id=candidate_id)
            return self._engine.submit_round(
                job_id,
                round_id,
                candidate_id,
                coerce_answers(answers) or [],
                started_at=started_at,
            )

        return self._execute(
            "submit_round_assessment",
            run,
            job_id=job_id,
            candidate_id=candidate_id,
            round_id=round_id,
        )

    def submit_round_feedback(
        self,
        job_id: str,
        round_id: int | None,
        candidate_id: str,
        rating: int,
        comment: str = "",
    ) -> SubmissionResult:
        def run() -> Transition:
            _require(job_id=job_id, round_id=round_id, candidate_id=candidate_id)
            return self._engine.attach_feedback(job_id, round_id, candidate_id, rating, comment)

        return self._execute(
            "submit_round_feedback",
            run,
            job_id=job_id,
            candidate_id=candidate_id,
            round_id=round_id,
        )

    def schedule_next_round(self, job_id: str, candidate_id: str) -> SubmissionResult:
        def run() -> Transition:
            _require(job_id=job_id, candidate_id=candidate_id)
            return self._engine.schedule_next_round(job_id, candidate_id)

        return self._execute("schedule_next_round", run, job_id=job_id, candidate_id=candidate_id)

    def _execute(
        self,
        operation: str,
        run: Callable[[], Transition],
        **context: Any,
    ) -> SubmissionResult:
        try:
            transition = run()
        except PipelineError as exc:
            self._logger.warning(
                "submission.failed",
                operation=operation,
                error=exc.message,
                error_type=type(exc).__name__,
                retryable=exc.retryable,
                **context,
            )
            return SubmissionResult.from_error(exc)
        return SubmissionResult.from_transition(transition)


def _require(**identifiers: Any) -> None:
    missing = [
        name
        for name, value in identifiers.items()
        if value is None or (isinstance(value, str) and not value.strip())
    ]
    if missing:
        raise MissingIdentifierError(missing)
