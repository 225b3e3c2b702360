from __future__ import annotations

from datetime import date

import pytest

from medi.meditation.model import SessionRecord
from medi.meditation.stats import compute_stats, format_duration, group_by_month


def _at(day: str, duration_sec: int = 600, completed: bool = True) -> SessionRecord:
    # Midday UTC keeps the local calendar day stable across time zones.
    return SessionRecord(
        started_at_utc=f"{day}T12:00:00+00:00",
        duration_sec=duration_sec,
        completed=completed,
    )


def test_empty_history() -> None:
    stats = compute_stats([], today=date(2026, 3, 10))
    assert stats.total_sessions == 0
    assert stats.total_minutes == 0
    assert stats.average_session_min == 0
    assert stats.current_streak_days == 0
    assert stats.longest_streak_days == 0


def test_totals_and_streaks() -> None:
    records = [
        _at("2026-03-01", 300),
        _at("2026-03-02", 600),
        _at("2026-03-03", 900),
        _at("2026-03-03", 300),
        _at("2026-03-08", 1200),
        _at("2026-03-09", 600),
        _at("2026-03-10", 600, completed=False),
    ]
    stats = compute_stats(records, today=date(2026, 3, 10))

    assert stats.total_sessions == 7
    assert stats.completed_sessions == 6
    assert stats.total_minutes == pytest.approx(65.0)
    assert stats.average_session_min == pytest.approx(65.0 / 6)
    assert stats.longest_streak_days == 3
    # 2026-03-10 has no completed session, the streak from 03-08 is still alive.
    assert stats.current_streak_days == 2


def test_current_streak_resets_after_missed_day() -> None:
    records = [_at("2026-03-01"), _at("2026-03-02")]
    assert compute_stats(records, today=date(2026, 3, 3)).current_streak_days == 2
    assert compute_stats(records, today=date(2026, 3, 4)).current_streak_days == 0


def test_group_by_month_newest_first() -> None:
    records = [_at("2026-01-15"), _at("2026-02-01"), _at("2026-02-20")]
    groups = group_by_month(records)

    assert list(groups) == ["February 2026", "January 2026"]
    assert [r.started_at_utc[:10] for r in groups["February 2026"]] == [
        "2026-02-20",
        "2026-02-01",
    ]


def test_format_duration() -> None:
    assert format_duration(0) == "00:00"
    assert format_duration(299.2) == "05:00"
    assert format_duration(61) == "01:01"
    assert format_duration(3725) == "1:02:05"
