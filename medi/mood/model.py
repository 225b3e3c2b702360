"""Mood check-in models."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from medi.meditation.model import new_id, now_utc_iso


class MoodState(str, Enum):
    STRESSED = "stressed"
    ANXIOUS = "anxious"
    TIRED = "tired"
    ENERGETIC = "energetic"
    CALM = "calm"
    SAD = "sad"
    EXCITED = "excited"
    OVERWHELMED = "overwhelmed"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def emoji(self) -> str:
        return _EMOJI[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_EMOJI: dict[MoodState, str] = {
    MoodState.STRESSED: "\U0001F630",
    MoodState.ANXIOUS: "\U0001F61F",
    MoodState.TIRED: "\U0001F634",
    MoodState.ENERGETIC: "⚡",
    MoodState.CALM: "\U0001F60C",
    MoodState.SAD: "\U0001F622",
    MoodState.EXCITED: "\U0001F929",
    MoodState.OVERWHELMED: "\U0001F92F",
}

_DESCRIPTIONS: dict[MoodState, str] = {
    MoodState.STRESSED: "Feeling tension or pressure",
    MoodState.ANXIOUS: "Worried or uneasy",
    MoodState.TIRED: "Low energy or sleepy",
    MoodState.ENERGETIC: "Full of energy and vitality",
    MoodState.CALM: "Peaceful and relaxed",
    MoodState.SAD: "Feeling down or melancholy",
    MoodState.EXCITED: "Enthusiastic and eager",
    MoodState.OVERWHELMED: "Too much to handle",
}

POSITIVE_MOODS: frozenset[MoodState] = frozenset(
    {MoodState.CALM, MoodState.ENERGETIC, MoodState.EXCITED}
)


def _check_range(name: str, value: int | None, low: int, high: int) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValueError(f"{name} must be an integer between {low} and {high}")


@dataclass(frozen=True)
class MoodSession:
    mood: MoodState
    timestamp_utc: str = field(default_factory=now_utc_iso)
    id: str = field(default_factory=new_id)
    mood_intensity: int | None = None
    stress_level: int | None = None
    energy_level: int | None = None
    context_tags: tuple[str, ...] = ()
    notes: str | None = None
    meditation_session_id: str | None = None
    meditation_duration_min: int | None = None
    completed_meditation: bool = False
    meditation_completed_at_utc: str | None = None
    post_mood_rating: int | None = None

    def __post_init__(self) -> None:
        _check_range("mood_intensity", self.mood_intensity, 1, 10)
        _check_range("stress_level", self.stress_level, 1, 10)
        _check_range("energy_level", self.energy_level, 1, 10)
        _check_range("post_mood_rating", self.post_mood_rating, 1, 5)

    def with_rating(self, rating: int) -> MoodSession:
        return replace(self, post_mood_rating=rating)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "mood": self.mood.value,
            "timestamp_utc": self.timestamp_utc,
            "mood_intensity": self.mood_intensity,
            "stress_level": self.stress_level,
            "energy_level": self.energy_level,
            "context_tags": list(self.context_tags),
            "notes": self.notes,
            "meditation_session_id": self.meditation_session_id,
            "meditation_duration_min": self.meditation_duration_min,
            "completed_meditation": self.completed_meditation,
            "meditation_completed_at_utc": self.meditation_completed_at_utc,
            "post_mood_rating": self.post_mood_rating,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MoodSession:
        return cls(
            id=str(raw["id"]),
            mood=MoodState(raw["mood"]),
            timestamp_utc=str(raw["timestamp_utc"]),
            mood_intensity=raw.get("mood_intensity"),
            stress_level=raw.get("stress_level"),
            energy_level=raw.get("energy_level"),
            context_tags=tuple(str(tag) for tag in raw.get("context_tags") or ()),
            notes=raw.get("notes"),
            meditation_session_id=raw.get("meditation_session_id"),
            meditation_duration_min=raw.get("meditation_duration_min"),
            completed_meditation=bool(raw.get("completed_meditation", False)),
            meditation_completed_at_utc=raw.get("meditation_completed_at_utc"),
            post_mood_rating=raw.get("post_mood_rating"),
        )
