"""Failure taxonomy shared by the engine and its entrypoints."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures surfaced to submission callers."""

    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PipelineError):
    """A job, application, round, question or assessment does not exist."""

    def __init__(self, entity: str, identifier: object):
        super().__init__(f"{entity.capitalize()} not found.")
        self.entity = entity
        self.identifier = identifier


class InvalidInputError(PipelineError):
    """Submitted values failed validation."""


class MissingIdentifierError(InvalidInputError):
    """Required identifiers were not supplied; raised before any read."""

    def __init__(self, fields: list[str]):
        super().__init__("Missing required information.")
        self.fields = fields

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Missing required information: {', '.join(self.fields)}"


class InvalidTransitionError(PipelineError):
    """The requested operation is not allowed from the current state."""


class ConfigurationError(PipelineError):
    """The pipeline is wired incorrectly, e.g. a round type has no scorer."""


class ConcurrencyConflict(PipelineError):
    """Optimistic write lost the race against another writer."""

    retryable = True

    def __init__(self, message: str = "Application was modified concurrently. Please try again."):
        super().__init__(message)


class DependencyLookupError(PipelineError):
    """A question or assessment read failed mid-scoring."""

    retryable = True

    def __init__(self, message: str = "Could not load round content. Please try again."):
        super().__init__(message)


__all__ = [
    "PipelineError",
    "NotFoundError",
    "InvalidInputError",
    "MissingIdentifierError",
    "InvalidTransitionError",
    "ConfigurationError",
    "ConcurrencyConflict",
    "DependencyLookupError",
]
