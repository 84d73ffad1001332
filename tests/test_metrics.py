"""Tests for the pure team pulse helpers."""
from __future__ import annotations

import pytest

from mento.services.metrics_service import (
    GOOD_ENERGY_MESSAGE,
    LOW_ENERGY_MESSAGE,
    MOOD_EMOJIS,
    average_mood,
    energy_sync,
    mood_emoji,
    team_pulse,
)


@pytest.mark.parametrize(
    "mood, expected",
    [
        (10, "😊"),
        (8, "😊"),
        (7, "🙂"),
        (6, "🙂"),
        (5, "😐"),
        (4, "😐"),
        (3, "😕"),
        (2, "😕"),
        (1, "😔"),
        (0, "😔"),
        (-4, "😔"),
    ],
)
def test_mood_emoji_bands(mood: int, expected: str) -> None:
    assert mood_emoji(mood) == expected


def test_mood_emoji_always_one_of_five_symbols() -> None:
    assert {mood_emoji(m) for m in range(-5, 20)} == set(MOOD_EMOJIS)


def test_average_mood_rounds_halves_up() -> None:
    assert average_mood([7, 8]) == 8
    assert average_mood([1, 2, 2]) == 2
    assert average_mood([5]) == 5


def test_average_mood_stays_within_input_range() -> None:
    moods = [3, 9, 4, 6, 10, 2]
    assert min(moods) <= average_mood(moods) <= max(moods)


def test_average_mood_of_nothing_is_none() -> None:
    assert average_mood([]) is None


def test_energy_sync_percentage() -> None:
    assert energy_sync([6, 5, 9, 2]) == 50
    assert energy_sync([6]) == 100
    assert energy_sync([1, 2, 3]) == 0
    assert energy_sync([6, 6, 1]) == 67
    assert energy_sync([]) is None


def test_team_pulse_ignores_members_without_check_in() -> None:
    members = [
        {"mood": 8, "energy": 7},
        {"mood": 5, "energy": 4},
        {"mood": None, "energy": None},
    ]
    pulse = team_pulse(members)
    assert pulse["average_mood"] == 7
    assert pulse["mood_emoji"] == "🙂"
    assert pulse["energy_sync"] == 50
    assert pulse["member_count"] == 3
    assert pulse["checked_in_count"] == 2
    assert pulse["message"] == GOOD_ENERGY_MESSAGE


def test_team_pulse_flags_low_energy() -> None:
    pulse = team_pulse([{"mood": 3, "energy": 2}, {"mood": 4, "energy": 6}, {"mood": 2, "energy": 1}])
    assert pulse["energy_sync"] == 33
    assert pulse["message"] == LOW_ENERGY_MESSAGE


def test_team_pulse_without_check_ins() -> None:
    pulse = team_pulse([{"mood": None, "energy": None}])
    assert pulse["average_mood"] is None
    assert pulse["mood_emoji"] is None
    assert pulse["energy_sync"] is None
    assert pulse["message"] is None
