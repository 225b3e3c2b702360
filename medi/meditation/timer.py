"""Meditation countdown state machine."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from medi.meditation.model import (
    AVAILABLE_DURATIONS_MIN,
    DEFAULT_DURATION_MIN,
    SessionRecord,
    TimerSnapshot,
    TimerState,
    now_utc_iso,
)
from medi.meditation.scheduler import Scheduler, TickHandle
from medi.meditation.session_store import (
    PersistenceError,
    PersistenceWriteError,
    SessionStore,
)


logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_SEC = 0.1
MAX_TICK_INTERVAL_SEC = 1.0

SnapshotCallback = Callable[[TimerSnapshot], None]
CompleteCallback = Callable[[SessionRecord], None]
ErrorCallback = Callable[[PersistenceError], None]


class SessionTimer:
    """
    Countdown for one meditation session at a time.

    idle -> running <-> paused -> idle (stop, nothing saved)
    running -> completed -> idle (countdown reached zero, record saved)

    Ticks keep arriving while paused; the handler ignores them. All calls
    are expected from a single thread (the event loop driving the scheduler).
    """

    def __init__(
        self,
        store: SessionStore,
        scheduler: Scheduler,
        *,
        duration_min: int = DEFAULT_DURATION_MIN,
        tick_interval_sec: float = DEFAULT_TICK_INTERVAL_SEC,
        available_durations_min: tuple[int, ...] = AVAILABLE_DURATIONS_MIN,
    ) -> None:
        if not 0 < tick_interval_sec <= MAX_TICK_INTERVAL_SEC:
            raise ValueError(
                f"Tick interval must be in (0, {MAX_TICK_INTERVAL_SEC}] seconds"
            )
        if duration_min not in available_durations_min:
            raise ValueError(f"Unsupported session duration: {duration_min} min")

        self._store = store
        self._scheduler = scheduler
        self.tick_interval_sec = tick_interval_sec
        self.available_durations_min = tuple(available_durations_min)

        self.selected_duration_min = duration_min
        self.remaining_sec: float = float(duration_min * 60)
        self.state: TimerState = "idle"
        self.started_at_utc: Optional[str] = None
        self._total_sec = duration_min * 60
        self._tick_handle: Optional[TickHandle] = None

        self._on_change: list[SnapshotCallback] = []
        self._on_complete: list[CompleteCallback] = []
        self._on_error: list[ErrorCallback] = []

        self.history: list[SessionRecord] = self._load_history()

    # ----- Listeners -----
    def subscribe(self, fn: SnapshotCallback) -> Callable[[], None]:
        self._on_change.append(fn)

        def _unsubscribe() -> None:
            if fn in self._on_change:
                self._on_change.remove(fn)

        return _unsubscribe

    def on_complete(self, fn: CompleteCallback) -> None:
        self._on_complete.append(fn)

    def on_error(self, fn: ErrorCallback) -> None:
        self._on_error.append(fn)

    def _notify(self, listeners: list[Callable[..., None]], payload: object) -> None:
        for fn in list(listeners):
            try:
                fn(payload)
            except Exception:
                logger.exception("Timer listener %r failed", fn)

    def _emit_change(self) -> None:
        self._notify(self._on_change, self.snapshot())

    # ----- Public API -----
    @property
    def is_active(self) -> bool:
        return self.state in ("running", "paused")

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            state=self.state,
            selected_duration_min=self.selected_duration_min,
            remaining_sec=self.remaining_sec,
            total_sec=self._total_sec,
            started_at_utc=self.started_at_utc,
            history_count=len(self.history),
        )

    def start(self) -> bool:
        if self.state != "idle":
            return False
        self.started_at_utc = now_utc_iso()
        self._total_sec = self.selected_duration_min * 60
        self.remaining_sec = float(self._total_sec)
        self.state = "running"
        self._tick_handle = self._scheduler.schedule(self.tick_interval_sec, self._on_tick)
        logger.info("Session started: %d min", self.selected_duration_min)
        self._emit_change()
        return True

    def pause(self) -> bool:
        if self.state != "running":
            return False
        self.state = "paused"
        self._emit_change()
        return True

    def resume(self) -> bool:
        if self.state != "paused":
            return False
        self.state = "running"
        self._emit_change()
        return True

    def stop(self) -> bool:
        if not self.is_active:
            return False
        self._cancel_ticks()
        self._reset_to_idle()
        logger.info("Session stopped before completion; nothing recorded")
        self._emit_change()
        return True

    def complete(self) -> Optional[SessionRecord]:
        """Finish a session whose countdown has reached zero."""
        if not self.is_active or self.remaining_sec > 0:
            return None

        self._cancel_ticks()
        self.state = "completed"
        record = SessionRecord(
            started_at_utc=self.started_at_utc or now_utc_iso(),
            duration_sec=self.selected_duration_min * 60,
            completed=True,
        )
        self.history.append(record)
        self._persist_history()
        logger.info(
            "Session completed: %d sec (history: %d)", record.duration_sec, len(self.history)
        )

        self._reset_to_idle()
        self._notify(self._on_complete, record)
        self._emit_change()
        return record

    def update_duration(self, minutes: int) -> bool:
        if minutes not in self.available_durations_min:
            logger.warning("Rejected unsupported duration: %r min", minutes)
            return False
        self.selected_duration_min = minutes
        if self.state == "idle":
            self._total_sec = minutes * 60
            self.remaining_sec = float(self._total_sec)
        self._emit_change()
        return True

    def close(self) -> None:
        self._cancel_ticks()
        if self.is_active:
            self._reset_to_idle()
        self._on_change.clear()
        self._on_complete.clear()
        self._on_error.clear()

    # ----- Internals -----
    def _on_tick(self) -> None:
        if self.state != "running":
            return
        remaining = round(self.remaining_sec - self.tick_interval_sec, 6)
        if remaining <= 0:
            self.remaining_sec = 0.0
            self.complete()
            return
        self.remaining_sec = remaining
        self._emit_change()

    def _cancel_ticks(self) -> None:
        if self._tick_handle is not None:
            self._scheduler.cancel(self._tick_handle)
            self._tick_handle = None

    def _reset_to_idle(self) -> None:
        self.state = "idle"
        self.started_at_utc = None
        self._total_sec = self.selected_duration_min * 60
        self.remaining_sec = float(self._total_sec)

    def _load_history(self) -> list[SessionRecord]:
        try:
            return list(self._store.load_all())
        except Exception as exc:
            logger.warning("Starting with empty session history: %s", exc)
            return []

    def _persist_history(self) -> None:
        try:
            self._store.save_all(list(self.history))
        except Exception as exc:
            error = (
                exc
                if isinstance(exc, PersistenceWriteError)
                else PersistenceWriteError(str(exc))
            )
            logger.error("Session history not saved: %s", error)
            self._notify(self._on_error, error)
