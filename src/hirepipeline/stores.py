"""Read repositories and the application store."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

from filelock import FileLock, Timeout
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConcurrencyConflict, NotFoundError
from .schemas import Application, Assessment, Job, Question


@runtime_checkable
class JobRepository(Protocol):
    def get_job(self, job_id: str) -> Job:
        """Return the job or raise ``NotFoundError``."""


@runtime_checkable
class QuestionRepository(Protocol):
    def get_questions(self, question_ids: Iterable[str]) -> dict[str, Question]:
        """Return every requested question keyed by id, or raise ``NotFoundError``."""


@runtime_checkable
class AssessmentRepository(Protocol):
    def get_assessment(self, assessment_id: str) -> Assessment:
        """Return the assessment or raise ``NotFoundError``."""


@runtime_checkable
class ApplicationStore(Protocol):
    """Durable per-application records with compare-and-swap writes."""

    def get(self, job_id: str, candidate_id: str) -> Application | None:
        """Return the current application snapshot, if any."""

    def save(self, application: Application, expected_version: int | None) -> Application:
        """Write ``application`` if the stored version still equals ``expected_version``.

        ``expected_version=None`` means the record must not exist yet. Returns the
        stored snapshot with its new version; raises ``ConcurrencyConflict`` otherwise.
        """


class InMemoryCatalog:
    """Jobs, questions and assessments held in memory."""

    def __init__(
        self,
        *,
        jobs: Iterable[Job] = (),
        questions: Iterable[Question] = (),
        assessments: Iterable[Assessment] = (),
    ) -> None:
        self._jobs = {job.job_id: job for job in jobs}
        self._questions = {question.question_id: question for question in questions}
        self._assessments = {item.assessment_id: item for item in assessments}

    def add_job(self, job: Job) -> None:
        self._jobs[job.job_id] = job

    def add_question(self, question: Question) -> None:
        self._questions[question.question_id] = question

    def add_assessment(self, assessment: Assessment) -> None:
        self._assessments[assessment.assessment_id] = assessment

    def get_job(self, job_id: str) -> Job:
        try:
            return self._jobs[job_id]
        except KeyError as exc:
            raise NotFoundError("job", job_id) from exc

    def get_questions(self, question_ids: Iterable[str]) -> dict[str, Question]:
        found: dict[str, Question] = {}
        for question_id in question_ids:
            try:
                found[question_id] = self._questions[question_id]
            except KeyError as exc:
                raise NotFoundError("question", question_id) from exc
        return found

    def get_assessment(self, assessment_id: str) -> Assessment:
        try:
            return self._assessments[assessment_id]
        except KeyError as exc:
            raise NotFoundError("assessment", assessment_id) from exc


class CatalogDocument(BaseModel):
    """On-disk catalog layout."""

    jobs: list[Job] = Field(default_factory=list)
    questions: list[Question] = Field(default_factory=list)
    assessments: list[Assessment] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class CatalogLoader:
    """Load a catalog JSON document into an ``InMemoryCatalog``."""

    def load(self, path: Path) -> InMemoryCatalog:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid catalog JSON: {exc}") from exc
        document = CatalogDocument.model_validate(data)
        return InMemoryCatalog(
            jobs=document.jobs,
            questions=document.questions,
            assessments=document.assessments,
        )


def _key(job_id: str, candidate_id: str) -> str:
    return f"{job_id}:{candidate_id}"


def _check_version(current: Application | None, expected_version: int | None) -> int:
    if expected_version is None:
        if current is not None:
            raise ConcurrencyConflict()
        return 1
    if current is None or current.version != expected_version:
        raise ConcurrencyConflict()
    return expected_version + 1


class InMemoryApplicationStore:
    """Thread-safe in-memory store."""

    def __init__(self) -> None:
        self._records: dict[str, Application] = {}
        self._lock = threading.Lock()

    def get(self, job_id: str, candidate_id: str) -> Application | None:
        with self._lock:
            return self._records.get(_key(job_id, candidate_id))

    def save(self, application: Application, expected_version: int | None) -> Application:
        key = _key(application.job_id, application.candidate_id)
        with self._lock:
            new_version = _check_version(self._records.get(key), expected_version)
            stored = application.model_copy(update={"version": new_version})
            self._records[key] = stored
            return stored

    def all(self) -> list[Application]:
        with self._lock:
            return list(self._records.values())


class JsonFileApplicationStore:
    """Applications persisted as a single JSON document.

    Every save holds an OS-level lock on a sidecar ``.lock`` file while it
    re-reads the document, checks the version and atomically replaces the file.
    Separate store instances and separate processes over the same path therefore
    serialize their compare-and-swap writes.
    """

    def __init__(self, path: Path, *, lock_timeout: float = 10.0):
        self._path = path
        self._lock = threading.Lock()
        self._file_lock = FileLock(str(path.with_suffix(path.suffix + ".lock")), timeout=lock_timeout)

    def get(self, job_id: str, candidate_id: str) -> Application | None:
        with self._lock:
            return self._read().get(_key(job_id, candidate_id))

    def save(self, application: Application, expected_version: int | None) -> Application:
        key = _key(application.job_id, application.candidate_id)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            try:
                with self._file_lock:
                    records = self._read()
                    new_version = _check_version(records.get(key), expected_version)
                    stored = application.model_copy(update={"version": new_version})
                    records[key] = stored
                    self._write(records)
                    return stored
            except Timeout as exc:
                raise ConcurrencyConflict() from exc

    def _read(self) -> dict[str, Application]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
            return {
                key: Application.model_validate(value)
                for key, value in data.get("applications", {}).items()
            }
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ValueError(f"Invalid application state file {self._path}: {exc}") from exc

    def _write(self, records: dict[str, Application]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "applications": {
                key: value.model_dump(mode="json") for key, value in sorted(records.items())
            }
        }
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)


__all__ = [
    "ApplicationStore",
    "AssessmentRepository",
    "CatalogLoader",
    "InMemoryApplicationStore",
    "InMemoryCatalog",
    "JobRepository",
    "JsonFileApplicationStore",
    "QuestionRepository",
]
