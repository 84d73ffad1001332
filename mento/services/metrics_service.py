"""Display aggregates derived from already-loaded data.

These functions are pure: they take plain numbers (or member dicts)
and never touch the database, which keeps the team pulse numbers easy
to unit test.
"""
from __future__ import annotations

import math
from typing import Iterable, Optional

MOOD_EMOJIS = ("😊", "🙂", "😐", "😕", "😔")
ENERGY_SYNC_THRESHOLD = 6
LOW_ENERGY_MESSAGE = "Low energy detected. Consider a team break or async check-in."
GOOD_ENERGY_MESSAGE = "Team energy is good! Great time for collaboration."


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def mood_emoji(mood: float) -> str:
    """Map a mood score onto one of five fixed emoji bands."""
    if mood >= 8:
        return MOOD_EMOJIS[0]
    if mood >= 6:
        return MOOD_EMOJIS[1]
    if mood >= 4:
        return MOOD_EMOJIS[2]
    if mood >= 2:
        return MOOD_EMOJIS[3]
    return MOOD_EMOJIS[4]


def average_mood(moods: Iterable[float]) -> Optional[int]:
    """Return the mean mood rounded to the nearest integer.

    Halves round up, so ``[7, 8]`` averages to ``8``. Returns ``None``
    for an empty sequence.
    """
    values = list(moods)
    if not values:
        return None
    return _round_half_up(sum(values) / len(values))


def energy_sync(energies: Iterable[float], threshold: int = ENERGY_SYNC_THRESHOLD) -> Optional[int]:
    """Return the percentage of energy values at or above ``threshold``."""
    values = list(energies)
    if not values:
        return None
    synced = sum(1 for energy in values if energy >= threshold)
    return _round_half_up(synced / len(values) * 100)


def team_pulse(members: list[dict]) -> dict:
    """Summarise a team's wellbeing from per-member mood and energy.

    Each member dict carries ``mood`` and ``energy`` keys, either of
    which may be ``None`` for members who have not checked in yet.
    Those members count towards ``member_count`` but not towards the
    averages.

    Returns
    -------
    dict
        ``average_mood``, ``mood_emoji``, ``energy_sync``,
        ``member_count``, ``checked_in_count`` and ``message``. The
        derived values are ``None`` when nobody has checked in.
    """
    checked_in = [m for m in members if m.get("mood") is not None and m.get("energy") is not None]
    avg = average_mood(m["mood"] for m in checked_in)
    sync = energy_sync(m["energy"] for m in checked_in)
    if sync is None:
        message = None
    elif sync < 50:
        message = LOW_ENERGY_MESSAGE
    else:
        message = GOOD_ENERGY_MESSAGE
    return {
        "average_mood": avg,
        "mood_emoji": mood_emoji(avg) if avg is not None else None,
        "energy_sync": sync,
        "member_count": len(members),
        "checked_in_count": len(checked_in),
        "message": message,
    }
