"""Round progression: scoring, state transitions and persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Sequence

import pendulum
import structlog
from pydantic import ValidationError

from ..errors import (
    ConcurrencyConflict,
    ConfigurationError,
    DependencyLookupError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    PipelineError,
)
from ..events import (
    APPLICATION_SUBMITTED,
    ROUND_COMPLETED,
    ROUND_SCHEDULED,
    EventEmitter,
    PipelineEvent,
)
from ..schemas import (
    Answer,
    Application,
    ApplicationStatus,
    Job,
    RoundBase,
    RoundFeedback,
    RoundResult,
    RoundStatus,
    Schedule,
    ScheduleStatus,
)
from ..stores import ApplicationStore, JobRepository
from .outcome import RoundOutcome, RoundScorer
from .scheduling import ScheduleGenerator


class ScorerRegistry:
    """Registry mapping round types to scorers."""

    def __init__(self, scorers: dict[str, RoundScorer]):
        self._scorers = dict(scorers)

    def get(self, round_type: str) -> RoundScorer:
        try:
            return self._scorers[round_type]
        except KeyError as exc:
            raise ConfigurationError(f"No scorer registered for round type {round_type!r}.") from exc

    def score(self, round_: RoundBase, answers: Sequence[Answer]) -> RoundOutcome:
        if not round_.requires_scoring:
            return RoundOutcome(method="manual", status=RoundStatus.PENDING)
        return self.get(round_.type).evaluate(round_, answers)

    def round_types(self) -> list[str]:
        return list(self._scorers.keys())


@dataclass(slots=True)
class Transition:
    """Application state produced by one engine operation."""

    application: Application
    round: RoundBase | None = None
    result: RoundResult | None = None
    schedule: Schedule | None = None
    advanced: bool = False
    duplicate: bool = False


class RoundProgressionEngine:
    """Evaluate round submissions and move applications through the pipeline.

    Every write is a compare-and-swap of the whole application record. On a
    version conflict the record is re-read and the transition recomputed, up
    to ``max_retries`` times. A result already recorded for the round turns
    the submission into a no-op.
    """

    def __init__(
        self,
        *,
        jobs: JobRepository,
        store: ApplicationStore,
        scorers: ScorerRegistry,
        schedule_generator: ScheduleGenerator,
        emitter: EventEmitter | None = None,
        max_retries: int = 3,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._jobs = jobs
        self._store = store
        self._scorers = scorers
        self._schedules = schedule_generator
        self._emitter = emitter
        self._max_retries = max_retries
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))
        self._logger = structlog.get_logger(__name__)

    def submit_application(
        self,
        job_id: str,
        candidate_id: str,
        answers: Sequence[Answer] | None = None,
    ) -> Transition:
        """Create the application and evaluate round 0 when it is a screening round."""
        job = self._jobs.get_job(job_id)
        existing = self._store.get(job_id, candidate_id)
        if existing is not None:
            return Transition(application=existing, duplicate=True)

        now = self._now()
        first_round = job.round_at(0)
        status = ApplicationStatus.SUBMITTED
        results: tuple[RoundResult, ...] = ()

        if first_round is not None and first_round.type == "screening" and answers is not None:
            outcome = self._score(first_round, answers)
            result = RoundResult(
                round_id=first_round.id,
                status=outcome.status,
                answers=tuple(answers),
                score=outcome.score,
                completed_at=now,
            )
            results = (result,)
            # screening at apply time leaves active_round_index at 0
            if outcome.status == RoundStatus.FAILED:
                status = ApplicationStatus.SCREENING_FAILED
            else:
                status = ApplicationStatus.SCREENING_PASSED

        application = Application(
            job_id=job_id,
            candidate_id=candidate_id,
            status=status,
            active_round_index=0,
            round_results=results,
            applied_at=now,
        )
        try:
            stored = self._store.save(application, None)
        except ConcurrencyConflict:
            current = self._store.get(job_id, candidate_id)
            if current is None:
                raise
            return Transition(application=current, duplicate=True)

        result = results[0] if results else None
        self._logger.info(
            "progression.application_submitted",
            job_id=job_id,
            candidate_id=candidate_id,
            status=stored.status.value,
            score=result.score if result else None,
        )
        self._emit(
            PipelineEvent(
                kind=APPLICATION_SUBMITTED,
                recipient_id=candidate_id,
                payload={
                    "job_id": job_id,
                    "status": stored.status.value,
                    "round_id": result.round_id if result else None,
                },
                emitted_at=now,
            )
        )
        return Transition(application=stored, round=first_round, result=result)

    def submit_round(
        self,
        job_id: str,
        round_id: int,
        candidate_id: str,
        answers: Sequence[Answer],
        *,
        started_at: datetime | None = None,
    ) -> Transition:
        """Score a round submission and apply the progression rules."""
        job = self._jobs.get_job(job_id)
        position = job.position_of(round_id)
        if position is None:
            raise NotFoundError("round", round_id)
        round_ = job.rounds[position]

        application = self._require_application(job_id, candidate_id)
        duplicate = self._guard_round(application, round_)
        if duplicate is not None:
            return duplicate

        outcome = self._score(round_, answers)
        submitted_at = self._now()
        if started_at is not None:
            started_at = pendulum.instance(started_at)

        def compute(current: Application) -> Transition:
            # re-run against every re-read snapshot
            duplicate = self._guard_round(current, round_)
            if duplicate is not None:
                return duplicate
            return self.transition(
                current,
                job,
                position,
                outcome,
                answers=answers,
                now=submitted_at,
                started_at=started_at,
            )

        transition = self._commit(application, compute)
        if transition.duplicate:
            return transition

        assert transition.result is not None
        self._logger.info(
            "progression.round_completed",
            job_id=job_id,
            candidate_id=candidate_id,
            round_id=round_id,
            method=outcome.method,
            round_status=transition.result.status.value,
            score=transition.result.score,
            application_status=transition.application.status.value,
            active_round_index=transition.application.active_round_index,
            advanced=transition.advanced,
        )
        self._emit(
            PipelineEvent(
                kind=ROUND_COMPLETED,
                recipient_id=candidate_id,
                payload={
                    "job_id": job_id,
                    "round_id": round_id,
                    "round_status": transition.result.status.value,
                    "score": transition.result.score,
                    "application_status": transition.application.status.value,
                },
                emitted_at=submitted_at,
            )
        )
        if transition.schedule is not None:
            self._emit_scheduled(job_id, candidate_id, transition.schedule, submitted_at)
        return transition

    def transition(
        self,
        application: Application,
        job: Job,
        position: int,
        outcome: RoundOutcome,
        *,
        answers: Sequence[Answer] = (),
        now: datetime,
        started_at: datetime | None = None,
    ) -> Transition:
        """Pure state transition for a scored submission at ``position``."""
        round_ = job.rounds[position]
        time_taken = None
        if started_at is not None:
            time_taken = max(0, int((now - started_at).total_seconds()))

        result = RoundResult(
            round_id=round_.id,
            status=outcome.status,
            answers=tuple(answers),
            score=outcome.score,
            completed_at=now,
            started_at=started_at,
            time_taken=time_taken,
        )
        schedules = tuple(
            schedule.model_copy(update={"status": ScheduleStatus.ATTEMPTED})
            if schedule.round_id == round_.id
            else schedule
            for schedule in application.schedules
        )

        is_last_round = position + 1 == len(job.rounds)
        active_round_index = application.active_round_index
        new_schedule: Schedule | None = None
        advanced = False

        if round_.auto_proceed and outcome.status == RoundStatus.PASSED and not is_last_round:
            next_position = position + 1
            active_round_index = max(active_round_index, next_position)
            status = ApplicationStatus.IN_PROGRESS
            advanced = True
            next_round = job.rounds[next_position]
            already_scheduled = any(item.round_id == next_round.id for item in schedules)
            if self._schedules.requires_schedule(next_round) and not already_scheduled:
                new_schedule = self._schedules.generate(next_round, now)
                schedules = schedules + (new_schedule,)
        elif outcome.status == RoundStatus.FAILED:
            status = ApplicationStatus.REJECTED
        else:
            status = ApplicationStatus.IN_PROGRESS

        updated = application.model_copy(
            update={
                "status": status,
                "active_round_index": active_round_index,
                "round_results": application.round_results + (result,),
                "schedules": schedules,
            }
        )
        return Transition(
            application=updated,
            round=round_,
            result=result,
            schedule=new_schedule,
            advanced=advanced,
        )

    def attach_feedback(
        self,
        job_id: str,
        round_id: int,
        candidate_id: str,
        rating: int,
        comment: str = "",
    ) -> Transition:
        """Attach or overwrite feedback on an existing round result."""
        try:
            feedback = RoundFeedback(rating=rating, comment=comment or "", submitted_at=self._now())
        except ValidationError as exc:
            raise InvalidInputError("Rating must be between 0 and 5.") from exc

        application = self._require_application(job_id, candidate_id)

        def compute(current: Application) -> Transition:
            existing = current.result_for(round_id)
            if existing is None:
                raise NotFoundError("round result", round_id)
            updated_result = existing.model_copy(update={"feedback": feedback})
            results = tuple(
                updated_result if item.round_id == round_id else item
                for item in current.round_results
            )
            return Transition(
                application=current.model_copy(update={"round_results": results}),
                result=updated_result,
            )

        transition = self._commit(application, compute)
        self._logger.info(
            "progression.feedback_attached",
            job_id=job_id,
            candidate_id=candidate_id,
            round_id=round_id,
            rating=rating,
        )
        return transition

    def schedule_next_round(self, job_id: str, candidate_id: str) -> Transition:
        """Operator action: move the candidate to the round after the active one."""
        job = self._jobs.get_job(job_id)
        application = self._require_application(job_id, candidate_id)
        now = self._now()

        def compute(current: Application) -> Transition:
            next_position = current.active_round_index + 1
            next_round = job.round_at(next_position)
            if next_round is None:
                raise InvalidTransitionError("No more rounds to schedule.")
            if not self._schedules.requires_schedule(next_round):
                return Transition(application=current, round=next_round)
            schedule = self._schedules.generate(next_round, now)
            updated = current.model_copy(
                update={
                    "active_round_index": next_position,
                    "status": ApplicationStatus.IN_PROGRESS,
                    "schedules": current.schedules + (schedule,),
                }
            )
            return Transition(
                application=updated,
                round=next_round,
                schedule=schedule,
                advanced=True,
            )

        transition = self._commit(application, compute)
        if transition.schedule is not None:
            self._logger.info(
                "progression.round_scheduled",
                job_id=job_id,
                candidate_id=candidate_id,
                round_id=transition.schedule.round_id,
                due_date=transition.schedule.due_date.isoformat(),
            )
            self._emit_scheduled(job_id, candidate_id, transition.schedule, now)
        return transition

    def _commit(
        self,
        application: Application,
        compute: Callable[[Application], Transition],
    ) -> Transition:
        current = application
        for attempt in range(self._max_retries + 1):
            transition = compute(current)
            if transition.application is current:
                return transition
            try:
                stored = self._store.save(transition.application, current.version)
            except ConcurrencyConflict:
                self._logger.warning(
                    "progression.version_conflict",
                    application_id=current.application_id,
                    expected_version=current.version,
                    attempt=attempt + 1,
                )
                current = self._require_application(current.job_id, current.candidate_id)
                continue
            transition.application = stored
            return transition

        raise ConcurrencyConflict()

    @staticmethod
    def _guard_round(application: Application, round_: RoundBase) -> Transition | None:
        """Duplicate no-op for an already recorded round; rejected applications are closed."""
        existing = application.result_for(round_.id)
        if existing is not None:
            return Transition(application=application, round=round_, result=existing, duplicate=True)
        if application.status == ApplicationStatus.REJECTED:
            raise InvalidTransitionError("Application has been rejected.")
        return None

    def _score(self, round_: RoundBase, answers: Sequence[Answer]) -> RoundOutcome:
        try:
            return self._scorers.score(round_, answers)
        except PipelineError:
            raise
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "progression.dependency_failed",
                round_id=round_.id,
                round_type=round_.type,
                error=str(exc),
            )
            raise DependencyLookupError() from exc

    def _require_application(self, job_id: str, candidate_id: str) -> Application:
        application = self._store.get(job_id, candidate_id)
        if application is None:
            raise NotFoundError("application", f"{job_id}:{candidate_id}")
        return application

    def _emit_scheduled(
        self,
        job_id: str,
        candidate_id: str,
        schedule: Schedule,
        now: datetime,
    ) -> None:
        self._emit(
            PipelineEvent(
                kind=ROUND_SCHEDULED,
                recipient_id=candidate_id,
                payload={
                    "job_id": job_id,
                    "round_id": schedule.round_id,
                    "due_date": schedule.due_date.isoformat(),
                },
                emitted_at=now,
            )
        )

    def _emit(self, event: PipelineEvent) -> None:
        if self._emitter is None:
            return
        try:
            self._emitter.emit(event)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning("event.emit_failed", kind=event.kind, error=str(exc))

    def _now(self) -> datetime:
        return pendulum.instance(self._now_provider())


def coerce_answers(raw: Iterable[Any] | None) -> list[Answer] | None:
    """Validate answer payloads given as ``Answer`` objects or mappings."""
    if raw is None:
        return None
    try:
        return [item if isinstance(item, Answer) else Answer.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise InvalidInputError("Answers must be question_id/answer pairs.") from exc
