"""Local persistence for completed meditation sessions."""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, Sequence

from medi.meditation.model import SessionRecord


STORE_VERSION = 1


class PersistenceError(RuntimeError):
    """Base class for session history persistence failures."""


class PersistenceReadError(PersistenceError):
    """Raised when the stored history cannot be read or decoded."""


class PersistenceWriteError(PersistenceError):
    """Raised when the history cannot be written."""


class SessionStore(Protocol):
    def load_all(self) -> list[SessionRecord]: ...

    def save_all(self, records: Sequence[SessionRecord]) -> None: ...


def _default_sessions_path() -> Path:
    return Path.home() / ".medi" / "sessions.json"


def record_to_dict(record: SessionRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "started_at_utc": record.started_at_utc,
        "duration_sec": int(record.duration_sec),
        "completed": bool(record.completed),
    }


def record_from_dict(raw: Any) -> SessionRecord:
    if not isinstance(raw, dict):
        raise PersistenceReadError("Session entry must be an object")
    try:
        record_id = raw["id"]
        started_at = raw["started_at_utc"]
        duration = raw["duration_sec"]
        completed = raw["completed"]
    except KeyError as exc:
        raise PersistenceReadError(f"Session entry missing field {exc}") from exc

    if not isinstance(record_id, str) or not isinstance(started_at, str):
        raise PersistenceReadError("Session 'id' and 'started_at_utc' must be strings")
    if isinstance(duration, bool) or not isinstance(duration, int):
        raise PersistenceReadError("Session 'duration_sec' must be an integer")
    if not isinstance(completed, bool):
        raise PersistenceReadError("Session 'completed' must be a boolean")
    try:
        parsed = datetime.fromisoformat(started_at)
    except ValueError as exc:
        raise PersistenceReadError(f"Invalid session timestamp: {started_at!r}") from exc
    if parsed.tzinfo is None:
        raise PersistenceReadError(f"Session timestamp has no UTC offset: {started_at!r}")
    try:
        return SessionRecord(
            id=record_id,
            started_at_utc=started_at,
            duration_sec=duration,
            completed=completed,
        )
    except ValueError as exc:
        raise PersistenceReadError(str(exc)) from exc


class JsonSessionStore:
    """Stores the whole history as one JSON document, rewritten on every save."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or _default_sessions_path()

    def load_all(self) -> list[SessionRecord]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceReadError(f"Unable to read {self.path}: {exc}") from exc

        if not isinstance(payload, dict):
            raise PersistenceReadError("Session history must be a JSON object")
        sessions = payload.get("sessions")
        if not isinstance(sessions, list):
            raise PersistenceReadError("Session history field 'sessions' must be an array")
        return [record_from_dict(item) for item in sessions]

    def save_all(self, records: Sequence[SessionRecord]) -> None:
        payload = {
            "version": STORE_VERSION,
            "sessions": [record_to_dict(record) for record in records],
        }
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=True, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise PersistenceWriteError(f"Unable to write {self.path}: {exc}") from exc


class InMemorySessionStore:
    def __init__(
        self,
        records: Sequence[SessionRecord] = (),
        *,
        fail_on_load: bool = False,
        fail_on_save: bool = False,
    ) -> None:
        self.records: list[SessionRecord] = list(records)
        self.fail_on_load = fail_on_load
        self.fail_on_save = fail_on_save
        self.save_count = 0

    def load_all(self) -> list[SessionRecord]:
        if self.fail_on_load:
            raise PersistenceReadError("Simulated read failure")
        return list(self.records)

    def save_all(self, records: Sequence[SessionRecord]) -> None:
        if self.fail_on_save:
            raise PersistenceWriteError("Simulated write failure")
        self.records = list(records)
        self.save_count += 1
