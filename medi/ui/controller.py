"""Controller shared by the terminal and web front-ends."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Iterable

from medi.core.settings import AppSettings
from medi.meditation.library import (
    GuidedMeditation,
    get_guided,
    list_guided,
    nearest_allowed_duration,
)
from medi.meditation.model import SessionRecord, TimerSnapshot
from medi.meditation.scheduler import AsyncioScheduler, Scheduler
from medi.meditation.session_store import (
    JsonSessionStore,
    PersistenceError,
    SessionStore,
)
from medi.meditation.stats import HistoryStats, compute_stats, group_by_month
from medi.meditation.timer import SessionTimer
from medi.mood.insights import MoodInsights, build_insights, optimal_duration_min
from medi.mood.journal import MoodJournal
from medi.mood.model import MoodSession, MoodState


logger = logging.getLogger(__name__)


class MeditationController:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        store: SessionStore | None = None,
        scheduler: Scheduler | None = None,
        journal: MoodJournal | None = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self.scheduler = scheduler or AsyncioScheduler()
        self.journal = journal or MoodJournal(self.settings.moods_path)
        self.timer = SessionTimer(
            store or JsonSessionStore(self.settings.sessions_path),
            self.scheduler,
            duration_min=self.settings.duration_min,
            tick_interval_sec=self.settings.tick_interval_sec,
        )
        self.last_error: PersistenceError | None = None
        self.timer.on_complete(self._on_session_complete)
        self.timer.on_error(self._on_persistence_error)

    # ----- Timer -----
    def snapshot(self) -> TimerSnapshot:
        return self.timer.snapshot()

    def subscribe(self, fn: Callable[[TimerSnapshot], None]) -> Callable[[], None]:
        return self.timer.subscribe(fn)

    def on_complete(self, fn: Callable[[SessionRecord], None]) -> None:
        self.timer.on_complete(fn)

    def start(self) -> bool:
        return self.timer.start()

    def pause(self) -> bool:
        return self.timer.pause()

    def resume(self) -> bool:
        return self.timer.resume()

    def stop(self) -> bool:
        return self.timer.stop()

    def select_duration(self, minutes: int) -> bool:
        return self.timer.update_duration(minutes)

    def select_guided(self, key: str) -> GuidedMeditation:
        item = get_guided(key)
        self.timer.update_duration(
            nearest_allowed_duration(item.duration_min, self.timer.available_durations_min)
        )
        return item

    def close(self) -> None:
        self.timer.close()

    # ----- History -----
    @property
    def history(self) -> list[SessionRecord]:
        return list(self.timer.history)

    def stats(self, today: date | None = None) -> HistoryStats:
        return compute_stats(self.timer.history, today=today)

    def history_by_month(self) -> dict[str, list[SessionRecord]]:
        return group_by_month(self.timer.history)

    def guided(self) -> list[GuidedMeditation]:
        return list_guided()

    # ----- Mood -----
    def check_in(
        self,
        mood: MoodState,
        *,
        apply_recommended_duration: bool = False,
        context_tags: Iterable[str] = (),
        notes: str | None = None,
        **levels: int,
    ) -> MoodSession:
        session = self.journal.check_in(mood, context_tags=context_tags, notes=notes, **levels)
        if apply_recommended_duration:
            self.timer.update_duration(
                nearest_allowed_duration(
                    optimal_duration_min(mood), self.timer.available_durations_min
                )
            )
        return session

    def rate_session(self, rating: int) -> MoodSession | None:
        return self.journal.rate_current(rating)

    def insights(self) -> MoodInsights:
        return build_insights(self.journal.sessions)

    # ----- Internals -----
    def _on_session_complete(self, record: SessionRecord) -> None:
        linked = self.journal.link_meditation(record)
        if linked is not None:
            logger.info("Linked mood check-in %s to session %s", linked.id, record.id)

    def _on_persistence_error(self, exc: PersistenceError) -> None:
        self.last_error = exc
