"""Mood-based recommendations and check-in insights."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from medi.meditation.library import GuidedMeditation, get_guided
from medi.mood.model import POSITIVE_MOODS, MoodSession, MoodState


_RECOMMENDED_KEYS: dict[MoodState, tuple[str, ...]] = {
    MoodState.STRESSED: ("life_happens_5", "still_mind_6", "breathing_10"),
    MoodState.ANXIOUS: ("breathing_3", "life_happens_5", "marc_5"),
    MoodState.TIRED: ("breathing_3", "padraig_10"),
    MoodState.ENERGETIC: ("breathing_10", "padraig_10"),
    MoodState.CALM: ("padraig_10", "still_mind_6"),
    MoodState.SAD: ("marc_5", "breathing_3", "life_happens_5"),
    MoodState.EXCITED: ("breathing_10", "still_mind_6"),
    MoodState.OVERWHELMED: ("life_happens_5", "breathing_3", "still_mind_6"),
}

_MESSAGES: dict[MoodState, str] = {
    MoodState.STRESSED: "I can help you release that tension. Let's find some peace together.",
    MoodState.ANXIOUS: "Anxiety is temporary. Let's ground yourself with some mindful breathing.",
    MoodState.TIRED: "Sometimes the mind needs rest as much as the body. Let's restore your energy.",
    MoodState.ENERGETIC: "Great energy! Let's channel it into focused mindfulness.",
    MoodState.CALM: "Beautiful! Let's deepen this sense of peace you're already feeling.",
    MoodState.SAD: "It's okay to feel this way. Let's nurture yourself with some gentle compassion.",
    MoodState.EXCITED: "Wonderful energy! Let's harness this excitement mindfully.",
    MoodState.OVERWHELMED: "Take a breath. Let's break through the noise and find your center.",
}

_OPTIMAL_DURATION_MIN: dict[MoodState, int] = {
    MoodState.STRESSED: 5,
    MoodState.ANXIOUS: 5,
    MoodState.OVERWHELMED: 5,
    MoodState.TIRED: 3,
    MoodState.SAD: 3,
    MoodState.ENERGETIC: 10,
    MoodState.EXCITED: 10,
    MoodState.CALM: 6,
}

TREND_WINDOW_DAYS = 7
IMPROVED_RATING = 4


def recommended_meditations(mood: MoodState) -> list[GuidedMeditation]:
    return [get_guided(key) for key in _RECOMMENDED_KEYS[mood]]


def personalized_message(mood: MoodState) -> str:
    return _MESSAGES[mood]


def optimal_duration_min(mood: MoodState) -> int:
    return _OPTIMAL_DURATION_MIN[mood]


@dataclass(frozen=True)
class MoodInsights:
    most_common_mood: MoodState | None
    mood_distribution: dict[MoodState, int]
    improvement_rate: float
    mood_trend: str
    recommended_actions: tuple[str, ...]


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _trend(sessions: list[MoodSession], now: datetime) -> str:
    cutoff = now - timedelta(days=TREND_WINDOW_DAYS)
    recent = [s for s in sessions if _parse_ts(s.timestamp_utc) > cutoff]
    if not recent:
        return "Not enough data yet"
    positive_ratio = sum(1 for s in recent if s.mood in POSITIVE_MOODS) / len(recent)
    if positive_ratio >= 0.7:
        return "Your mood has been largely positive this week!"
    if positive_ratio >= 0.4:
        return "You've had a balanced week with ups and downs"
    return "You've been facing some challenges. Remember to be kind to yourself"


def _actions(most_common: MoodState | None, improvement_rate: float) -> tuple[str, ...]:
    actions: list[str] = []
    if most_common in (MoodState.STRESSED, MoodState.ANXIOUS, MoodState.OVERWHELMED):
        actions.append("Consider shorter, more frequent meditation sessions")
        actions.append("Try breathing exercises throughout the day")
    elif most_common is MoodState.TIRED:
        actions.append("Morning meditations might help boost your energy")
        actions.append("Consider checking your sleep schedule")
    elif most_common is MoodState.SAD:
        actions.append("Gratitude practice can help shift perspective")
        actions.append("Be patient and gentle with yourself")
    elif most_common is not None:
        actions.append("Keep up your great meditation practice!")

    if improvement_rate < 50:
        actions.append("Try different meditation styles to find what works best")
    return tuple(actions)


def build_insights(
    sessions: Iterable[MoodSession],
    now: datetime | None = None,
) -> MoodInsights:
    items = list(sessions)
    counts = Counter(s.mood for s in items)
    most_common = counts.most_common(1)[0][0] if counts else None

    rated = [s for s in items if s.post_mood_rating is not None]
    improved = [s for s in rated if (s.post_mood_rating or 0) >= IMPROVED_RATING]
    improvement_rate = (len(improved) / len(rated) * 100.0) if rated else 0.0

    return MoodInsights(
        most_common_mood=most_common,
        mood_distribution=dict(counts),
        improvement_rate=improvement_rate,
        mood_trend=_trend(items, now or datetime.now(tz=timezone.utc)),
        recommended_actions=_actions(most_common, improvement_rate),
    )
