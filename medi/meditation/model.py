"""Meditation session domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal
from uuid import uuid4


AVAILABLE_DURATIONS_MIN: tuple[int, ...] = (5, 10, 15, 20)
DEFAULT_DURATION_MIN = 10

TimerState = Literal["idle", "running", "paused", "completed"]


def now_utc_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True)
class SessionRecord:
    started_at_utc: str
    duration_sec: int
    completed: bool
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        if self.duration_sec <= 0:
            raise ValueError("Session duration must be positive")

    @property
    def started_at(self) -> datetime:
        return datetime.fromisoformat(self.started_at_utc)


@dataclass(frozen=True)
class TimerSnapshot:
    state: TimerState
    selected_duration_min: int
    remaining_sec: float
    total_sec: int
    started_at_utc: str | None
    history_count: int

    @property
    def elapsed_sec(self) -> float:
        return max(0.0, self.total_sec - self.remaining_sec)

    @property
    def progress(self) -> float:
        if self.total_sec <= 0:
            return 0.0
        return min(1.0, self.elapsed_sec / self.total_sec)
