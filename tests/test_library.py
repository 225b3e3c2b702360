from __future__ import annotations

import pytest

from medi.meditation.library import get_guided, list_guided, nearest_allowed_duration


def test_guided_catalog() -> None:
    items = list_guided()
    assert len(items) == 6
    assert len({item.key for item in items}) == 6
    assert get_guided("breathing_3").title == "3-Minute Breathing"
    assert get_guided("still_mind_6").duration_label == "6 min"


def test_unknown_guided_key() -> None:
    with pytest.raises(KeyError):
        get_guided("missing")


def test_nearest_allowed_duration() -> None:
    assert nearest_allowed_duration(3) == 5
    assert nearest_allowed_duration(6) == 5
    assert nearest_allowed_duration(10) == 10
    assert nearest_allowed_duration(12) == 10
    assert nearest_allowed_duration(45) == 20
    assert nearest_allowed_duration(7) == 5
    assert nearest_allowed_duration(4, allowed=(2, 6)) == 2
