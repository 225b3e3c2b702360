from __future__ import annotations

import pytest

from medi.meditation.model import AVAILABLE_DURATIONS_MIN, SessionRecord, TimerSnapshot
from medi.meditation.scheduler import ManualScheduler
from medi.meditation.session_store import InMemorySessionStore, PersistenceError
from medi.meditation.timer import SessionTimer


def _timer(
    store: InMemorySessionStore | None = None,
    duration_min: int = 5,
    tick_interval_sec: float = 1.0,
) -> tuple[SessionTimer, ManualScheduler, InMemorySessionStore]:
    scheduler = ManualScheduler()
    backing = store or InMemorySessionStore()
    timer = SessionTimer(
        backing,
        scheduler,
        duration_min=duration_min,
        tick_interval_sec=tick_interval_sec,
    )
    return timer, scheduler, backing


def test_defaults_to_ten_minutes_idle() -> None:
    timer = SessionTimer(InMemorySessionStore(), ManualScheduler())
    assert timer.state == "idle"
    assert timer.selected_duration_min == 10
    assert timer.remaining_sec == 600
    assert timer.history == []


@pytest.mark.parametrize("minutes", AVAILABLE_DURATIONS_MIN)
def test_update_duration_while_idle_resets_remaining(minutes: int) -> None:
    timer, _, _ = _timer()
    assert timer.update_duration(minutes) is True
    assert timer.selected_duration_min == minutes
    assert timer.remaining_sec == minutes * 60


def test_update_duration_rejects_unsupported_value() -> None:
    timer, _, _ = _timer(duration_min=15)
    assert timer.update_duration(7) is False
    assert timer.update_duration(0) is False
    assert timer.selected_duration_min == 15
    assert timer.remaining_sec == 900


def test_five_minute_session_completes_on_last_tick() -> None:
    timer, scheduler, store = _timer(duration_min=5)
    timer.start()

    scheduler.advance(299)
    assert timer.state == "running"
    assert timer.remaining_sec == 1

    scheduler.advance()
    assert timer.state == "idle"
    assert len(timer.history) == 1
    record = timer.history[-1]
    assert record.duration_sec == 300
    assert record.completed is True
    assert timer.remaining_sec == 300
    assert store.records == timer.history
    assert store.save_count == 1
    assert scheduler.active_handles == ()


def test_fine_grained_ticks_complete_without_drift() -> None:
    timer, scheduler, _ = _timer(duration_min=5, tick_interval_sec=0.1)
    timer.start()

    scheduler.advance(2999)
    assert timer.state == "running"
    assert timer.remaining_sec == pytest.approx(0.1)

    scheduler.advance()
    assert timer.state == "idle"
    assert len(timer.history) == 1


def test_stop_discards_attempt() -> None:
    timer, scheduler, store = _timer(duration_min=10)
    timer.start()
    scheduler.advance(120)
    assert timer.stop() is True

    assert timer.state == "idle"
    assert timer.remaining_sec == 600
    assert timer.history == []
    assert store.save_count == 0
    assert scheduler.active_handles == ()

    # no dangling ticks after stop
    assert scheduler.advance(10) == 0
    assert timer.remaining_sec == 600


def test_paused_ticks_do_not_change_remaining() -> None:
    timer, scheduler, _ = _timer(duration_min=5)
    timer.start()
    scheduler.advance(10)
    assert timer.pause() is True
    before = timer.remaining_sec

    scheduler.advance(50)
    assert timer.remaining_sec == before
    assert len(scheduler.active_handles) == 1

    assert timer.resume() is True
    scheduler.advance(1)
    assert timer.remaining_sec == before - 1


def test_stop_from_paused_returns_to_idle() -> None:
    timer, scheduler, _ = _timer(duration_min=5)
    timer.start()
    timer.pause()
    assert timer.stop() is True
    assert timer.state == "idle"
    assert timer.history == []
    assert scheduler.active_handles == ()


def test_duration_change_mid_session_keeps_countdown() -> None:
    timer, scheduler, _ = _timer(duration_min=5)
    timer.start()
    scheduler.advance(60)

    assert timer.update_duration(15) is True
    assert timer.selected_duration_min == 15
    assert timer.remaining_sec == 240

    timer.stop()
    assert timer.remaining_sec == 900


def test_completed_record_uses_latest_selected_duration() -> None:
    timer, scheduler, _ = _timer(duration_min=5)
    timer.start()
    timer.update_duration(20)
    scheduler.advance(300)

    assert timer.state == "idle"
    assert timer.history[-1].duration_sec == 1200
    assert timer.remaining_sec == 1200


def test_invalid_transitions_are_ignored() -> None:
    timer, scheduler, _ = _timer()
    assert timer.pause() is False
    assert timer.resume() is False
    assert timer.stop() is False
    assert timer.complete() is None

    timer.start()
    assert timer.start() is False
    assert timer.resume() is False
    assert len(scheduler.active_handles) == 1


def test_complete_requires_countdown_at_zero() -> None:
    timer, scheduler, _ = _timer(duration_min=5)
    timer.start()
    scheduler.advance(3)
    assert timer.complete() is None
    assert timer.state == "running"
    assert timer.history == []


def test_history_seeded_from_store() -> None:
    existing = SessionRecord(
        started_at_utc="2026-01-01T08:00:00+00:00",
        duration_sec=600,
        completed=True,
    )
    timer, scheduler, store = _timer(InMemorySessionStore([existing]), duration_min=5)
    timer.start()
    scheduler.advance(300)

    assert [r.id for r in timer.history][0] == existing.id
    assert len(store.records) == 2
    assert store.records[0] == existing


def test_load_failure_starts_empty() -> None:
    timer, _, _ = _timer(InMemorySessionStore(fail_on_load=True))
    assert timer.history == []
    assert timer.state == "idle"


def test_save_failure_is_reported_and_not_fatal() -> None:
    errors: list[PersistenceError] = []
    completed: list[SessionRecord] = []
    timer, scheduler, store = _timer(InMemorySessionStore(fail_on_save=True))
    timer.on_error(errors.append)
    timer.on_complete(completed.append)

    timer.start()
    scheduler.advance(300)

    assert timer.state == "idle"
    assert len(timer.history) == 1
    assert len(completed) == 1
    assert len(errors) == 1
    assert store.records == []


def test_subscribers_receive_snapshots_until_unsubscribed() -> None:
    snaps: list[TimerSnapshot] = []
    timer, scheduler, _ = _timer(duration_min=5)
    unsubscribe = timer.subscribe(snaps.append)

    timer.start()
    scheduler.advance(2)
    assert [s.state for s in snaps] == ["running", "running", "running"]
    assert snaps[-1].remaining_sec == 298
    assert snaps[-1].elapsed_sec == 2

    unsubscribe()
    scheduler.advance(2)
    assert len(snaps) == 3


def test_close_cancels_ticking() -> None:
    timer, scheduler, _ = _timer(duration_min=5)
    timer.start()
    timer.close()
    assert scheduler.active_handles == ()
    assert timer.state == "idle"
    assert timer.history == []


def test_rejects_coarse_tick_interval() -> None:
    with pytest.raises(ValueError):
        SessionTimer(InMemorySessionStore(), ManualScheduler(), tick_interval_sec=2.0)


def test_failing_listener_does_not_stall_the_countdown() -> None:
    timer, scheduler, store = _timer(duration_min=5)
    calls: list[int] = []
    completed: list[SessionRecord] = []

    def flaky(_snap: TimerSnapshot) -> None:
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("render failed")

    def broken(_record: SessionRecord) -> None:
        raise RuntimeError("boom")

    timer.subscribe(flaky)
    timer.on_complete(broken)
    timer.on_complete(completed.append)

    timer.start()
    scheduler.advance(300)

    assert timer.state == "idle"
    assert len(timer.history) == 1
    assert len(completed) == 1
    assert store.save_count == 1
    assert scheduler.active_handles == ()
