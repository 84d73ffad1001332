"""Tests for the collection gateway."""
from __future__ import annotations

from datetime import date

import pytest

from mento.errors import ConflictError
from mento.gateway import ROOM_CODE_LENGTH


def _mood(gateway, user_id: str, day: date, mood: int):
    return gateway.insert("mood_entries", {"user_id": user_id, "date": day, "mood": mood})


def test_select_filters_orders_and_limits(gateway) -> None:
    _mood(gateway, "u1", date(2024, 1, 3), 5)
    _mood(gateway, "u1", date(2024, 1, 1), 7)
    _mood(gateway, "u1", date(2024, 1, 2), 6)
    _mood(gateway, "u2", date(2024, 1, 1), 2)

    ascending = gateway.select("mood_entries", {"user_id": "u1"}, order=["date"])
    assert [row.mood for row in ascending] == [7, 6, 5]

    latest = gateway.select("mood_entries", {"user_id": "u1"}, order=["-date"], limit=1)
    assert [row.date for row in latest] == [date(2024, 1, 3)]


def test_select_with_list_value_matches_any(gateway) -> None:
    _mood(gateway, "u1", date(2024, 1, 1), 7)
    _mood(gateway, "u2", date(2024, 1, 1), 2)
    _mood(gateway, "u3", date(2024, 1, 1), 4)

    rows = gateway.select("mood_entries", {"user_id": ["u1", "u3"]}, order=["mood"])
    assert [row.user_id for row in rows] == ["u3", "u1"]


def test_select_one_returns_none_when_empty(gateway) -> None:
    assert gateway.select_one("teams", {"room_code": "ABCDEF"}) is None


def test_update_and_delete_report_row_counts(gateway) -> None:
    entry = _mood(gateway, "u1", date(2024, 1, 1), 7)
    _mood(gateway, "u1", date(2024, 1, 2), 3)

    assert gateway.update("mood_entries", {"mood": 9}, {"id": entry.id}) == 1
    assert gateway.select_one("mood_entries", {"id": entry.id}).mood == 9
    assert gateway.update("mood_entries", {"mood": 1}, {"id": "missing"}) == 0

    assert gateway.delete("mood_entries", {"user_id": "u1"}) == 2
    assert gateway.select("mood_entries") == []


def test_update_and_delete_require_filters(gateway) -> None:
    with pytest.raises(ValueError):
        gateway.update("mood_entries", {"mood": 1}, {})
    with pytest.raises(ValueError):
        gateway.delete("mood_entries", {})


def test_unknown_collection_and_column(gateway) -> None:
    with pytest.raises(ValueError):
        gateway.select("widgets")
    with pytest.raises(ValueError):
        gateway.select("teams", {"colour": "red"})


def test_duplicate_daily_entry_is_a_conflict(gateway) -> None:
    _mood(gateway, "u1", date(2024, 1, 1), 7)
    with pytest.raises(ConflictError):
        _mood(gateway, "u1", date(2024, 1, 1), 4)
    # the session is usable again after the rollback
    assert len(gateway.select("mood_entries")) == 1


def test_generate_room_code(gateway) -> None:
    code = gateway.rpc("generate_room_code")
    assert len(code) == ROOM_CODE_LENGTH
    assert code == code.upper()
    assert code.isalnum()


def test_unknown_procedure(gateway) -> None:
    with pytest.raises(ValueError):
        gateway.rpc("drop_everything")


def test_atomic_rolls_back_every_write(gateway) -> None:
    with pytest.raises(RuntimeError):
        with gateway.atomic():
            team = gateway.insert("teams", {"name": "Crew", "room_code": "ABC123", "created_by": "u1"})
            gateway.insert("team_members", {"team_id": team.id, "user_id": "u1"})
            raise RuntimeError("boom")

    assert gateway.select("teams") == []
    assert gateway.select("team_members") == []


def test_atomic_commits_once_at_the_end(gateway) -> None:
    with gateway.atomic():
        team = gateway.insert("teams", {"name": "Crew", "room_code": "ABC123", "created_by": "u1"})
        gateway.insert("team_members", {"team_id": team.id, "user_id": "u1"})

    assert len(gateway.select("teams")) == 1
    assert len(gateway.select("team_members", {"team_id": team.id})) == 1
