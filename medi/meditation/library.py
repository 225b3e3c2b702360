"""Built-in guided meditation catalog."""

from __future__ import annotations

from dataclasses import dataclass

from medi.meditation.model import AVAILABLE_DURATIONS_MIN


@dataclass(frozen=True)
class GuidedMeditation:
    key: str
    title: str
    duration_min: int
    description: str

    @property
    def duration_label(self) -> str:
        return f"{self.duration_min} min"


GUIDED_MEDITATIONS: tuple[GuidedMeditation, ...] = (
    GuidedMeditation(
        key="breathing_3",
        title="3-Minute Breathing",
        duration_min=3,
        description="A gentle introduction to mindful breathing",
    ),
    GuidedMeditation(
        key="life_happens_5",
        title="Life Happens Breathing",
        duration_min=5,
        description="Breathing meditation for stressful moments",
    ),
    GuidedMeditation(
        key="marc_5",
        title="MARC Breathing",
        duration_min=5,
        description="Mindfulness-based breathing practice",
    ),
    GuidedMeditation(
        key="still_mind_6",
        title="Still Mind Breath Awareness",
        duration_min=6,
        description="Cultivating awareness through breath",
    ),
    GuidedMeditation(
        key="breathing_10",
        title="10-Minute Breathing",
        duration_min=10,
        description="Extended mindful breathing session",
    ),
    GuidedMeditation(
        key="padraig_10",
        title="Padraig's Mindfulness",
        duration_min=10,
        description="Mindfulness of breathing meditation",
    ),
)


def list_guided() -> list[GuidedMeditation]:
    return list(GUIDED_MEDITATIONS)


def get_guided(key: str) -> GuidedMeditation:
    for item in GUIDED_MEDITATIONS:
        if item.key == key:
            return item
    raise KeyError(f"Unknown guided meditation '{key}'")


def nearest_allowed_duration(
    minutes: int,
    allowed: tuple[int, ...] = AVAILABLE_DURATIONS_MIN,
) -> int:
    # Ties resolve to the shorter duration.
    return min(sorted(allowed), key=lambda value: abs(value - minutes))
