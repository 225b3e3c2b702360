"""Mood check-ins stored locally and linked to completed sessions."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Iterable

from medi.meditation.model import SessionRecord, now_utc_iso
from medi.mood.model import MoodSession, MoodState


logger = logging.getLogger(__name__)


def _default_moods_path() -> Path:
    return Path.home() / ".medi" / "moods.json"


def load_mood_sessions(path: Path) -> list[MoodSession]:
    if not path.exists():
        return []
    payload = json.loads(path.read_text(encoding="utf-8"))
    items = payload.get("moods") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        raise ValueError("Mood journal field 'moods' must be an array")
    return [MoodSession.from_dict(item) for item in items]


def save_mood_sessions(sessions: Iterable[MoodSession], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {"version": 1, "moods": [s.to_dict() for s in sessions]}
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")
    os.replace(tmp, path)


class MoodJournal:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_moods_path()
        self.current: MoodSession | None = None
        try:
            self.sessions: list[MoodSession] = load_mood_sessions(self.path)
        except Exception as exc:
            logger.warning("Starting with empty mood journal: %s", exc)
            self.sessions = []

    def check_in(
        self,
        mood: MoodState,
        *,
        mood_intensity: int | None = None,
        stress_level: int | None = None,
        energy_level: int | None = None,
        context_tags: Iterable[str] = (),
        notes: str | None = None,
    ) -> MoodSession:
        session = MoodSession(
            mood=mood,
            mood_intensity=mood_intensity,
            stress_level=stress_level,
            energy_level=energy_level,
            context_tags=tuple(context_tags),
            notes=notes,
        )
        self.sessions.append(session)
        self.current = session
        self._save()
        logger.info("Mood check-in: %s", mood.value)
        return session

    def link_meditation(self, record: SessionRecord) -> MoodSession | None:
        if self.current is None:
            return None
        linked = replace(
            self.current,
            meditation_session_id=record.id,
            meditation_duration_min=record.duration_sec // 60,
            completed_meditation=record.completed,
            meditation_completed_at_utc=now_utc_iso(),
        )
        self._replace(linked)
        return linked

    def rate_current(self, rating: int) -> MoodSession | None:
        if self.current is None:
            return None
        rated = self.current.with_rating(rating)
        self._replace(rated)
        self.current = None
        return rated

    def _replace(self, updated: MoodSession) -> None:
        for index, session in enumerate(self.sessions):
            if session.id == updated.id:
                self.sessions[index] = updated
                break
        if self.current is not None and self.current.id == updated.id:
            self.current = updated
        self._save()

    def _save(self) -> None:
        try:
            save_mood_sessions(self.sessions, self.path)
        except OSError as exc:
            logger.error("Mood journal not saved: %s", exc)
