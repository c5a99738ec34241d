"""Outbound notification events."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import structlog

APPLICATION_SUBMITTED = "application_submitted"
ROUND_COMPLETED = "round_completed"
ROUND_SCHEDULED = "round_scheduled"


@dataclass(slots=True)
class PipelineEvent:
    """Fire-and-forget notification for the delivery subsystem."""

    kind: str
    recipient_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    emitted_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "recipient_id": self.recipient_id,
            "payload": self.payload,
            "emitted_at": self.emitted_at.isoformat() if self.emitted_at else None,
        }


@runtime_checkable
class EventEmitter(Protocol):
    def emit(self, event: PipelineEvent) -> None:
        """Deliver the event. May raise; callers treat delivery as best-effort."""


class LoggingEventEmitter:
    """Write events to the structured log."""

    def __init__(self) -> None:
        self._logger = structlog.get_logger(__name__)

    def emit(self, event: PipelineEvent) -> None:
        self._logger.info("event.emitted", **event.to_dict())


class JsonlEventEmitter:
    """Append-only event log writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, event: PipelineEvent) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(event.to_dict(), ensure_ascii=False, default=str))
            handle.write("\n")


__all__ = [
    "APPLICATION_SUBMITTED",
    "ROUND_COMPLETED",
    "ROUND_SCHEDULED",
    "EventEmitter",
    "JsonlEventEmitter",
    "LoggingEventEmitter",
    "PipelineEvent",
]
