"""Aggregates over the meditation history."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from medi.meditation.model import SessionRecord


@dataclass(frozen=True)
class HistoryStats:
    total_sessions: int
    completed_sessions: int
    total_minutes: float
    average_session_min: float
    current_streak_days: int
    longest_streak_days: int


def _local_day(record: SessionRecord) -> date:
    started = record.started_at
    if started.tzinfo is not None:
        started = started.astimezone()
    return started.date()


def _completed_days(records: Iterable[SessionRecord]) -> list[date]:
    return sorted({_local_day(r) for r in records if r.completed})


def longest_streak(days: list[date]) -> int:
    best = 0
    run = 0
    previous: date | None = None
    for day in days:
        if previous is not None and day - previous == timedelta(days=1):
            run += 1
        else:
            run = 1
        best = max(best, run)
        previous = day
    return best


def current_streak(days: list[date], today: date) -> int:
    if not days:
        return 0
    # A streak survives until the end of the day after the last session.
    if (today - days[-1]).days > 1:
        return 0
    streak = 1
    for newer, older in zip(reversed(days), list(reversed(days))[1:]):
        if newer - older != timedelta(days=1):
            break
        streak += 1
    return streak


def compute_stats(records: Iterable[SessionRecord], today: date | None = None) -> HistoryStats:
    items = list(records)
    completed = [r for r in items if r.completed]
    total_minutes = sum(r.duration_sec for r in completed) / 60.0
    days = _completed_days(completed)
    return HistoryStats(
        total_sessions=len(items),
        completed_sessions=len(completed),
        total_minutes=total_minutes,
        average_session_min=(total_minutes / len(completed)) if completed else 0.0,
        current_streak_days=current_streak(days, today or date.today()),
        longest_streak_days=longest_streak(days),
    )


def group_by_month(records: Iterable[SessionRecord]) -> dict[str, list[SessionRecord]]:
    ordered = sorted(records, key=lambda r: r.started_at, reverse=True)
    out: dict[str, list[SessionRecord]] = {}
    for record in ordered:
        key = _local_day(record).strftime("%B %Y")
        out.setdefault(key, []).append(record)
    return out


def format_duration(total_seconds: float) -> str:
    seconds = max(0, math.ceil(total_seconds))
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours:d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"
