"""Due-date scheduling for upcoming rounds."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import pendulum

from ..schemas import RoundBase, Schedule, ScheduleStatus


@dataclass
class ScheduleConfig:
    """Deadline settings for scheduled rounds."""

    due_days: int = 2


class ScheduleGenerator:
    """Create ``Pending`` schedules due a fixed number of days out."""

    def __init__(
        self,
        *,
        config: ScheduleConfig | None = None,
        now_provider: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or ScheduleConfig()
        self._now_provider = now_provider or (lambda: pendulum.now("UTC"))

    @staticmethod
    def requires_schedule(round_: RoundBase) -> bool:
        return round_.requires_schedule

    def generate(self, round_: RoundBase, now: datetime | None = None) -> Schedule:
        scheduled_at = pendulum.instance(now if now is not None else self._now_provider())
        return Schedule(
            round_id=round_.id,
            scheduled_at=scheduled_at,
            due_date=scheduled_at.add(days=self._config.due_days),
            status=ScheduleStatus.PENDING,
        )
