"""Tests for the user snapshot loader."""
from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from mento.errors import GatewayError, NotFoundError, ValidationError
from mento.gateway import DataGateway
from mento.identity import Identity
from mento.models import Mode
from mento.services import UserDataLoader


class FlakyGateway(DataGateway):
    """Gateway whose reads of some collections always fail."""

    def __init__(self, failing: set[str]) -> None:
        super().__init__()
        self.failing = failing

    def select(self, collection, *args, **kwargs):
        if collection in self.failing:
            raise GatewayError(f"{collection} unavailable")
        return super().select(collection, *args, **kwargs)


def test_first_load_creates_default_profile(gateway, make_identity) -> None:
    identity = make_identity("jordan", with_profile=False)
    loader = UserDataLoader(identity, gateway)

    user = loader.load()

    profile = user["profile"]
    assert profile.id == identity.id
    assert profile.name == "jordan"
    assert profile.mode is Mode.SOLO
    assert profile.daily_reminder_time == "09:00"
    assert user["last_check_in"] is None
    assert user["mood_history"] == []
    assert user["journal_entries"] == []
    assert loader.loading is False
    # a second load reuses the same row
    loader.load()
    assert len(gateway.select("users", {"id": identity.id})) == 1


def test_profile_name_falls_back_without_email(gateway) -> None:
    loader = UserDataLoader(Identity("no-email-id"), gateway)
    assert loader.load()["profile"].name == "User"


def test_load_without_identity(gateway) -> None:
    loader = UserDataLoader(None, gateway)
    assert loader.load() is None
    assert loader.user is None
    assert loader.loading is False


def test_profile_failure_leaves_snapshot_empty(app, make_identity) -> None:
    loader = UserDataLoader(make_identity("casey", with_profile=False), FlakyGateway({"users"}))
    assert loader.load() is None
    assert loader.user is None


def test_history_failure_degrades_to_empty(app, make_identity) -> None:
    identity = make_identity("casey")
    UserDataLoader(identity).add_check_in(6, 6, on_date=date(2024, 1, 1))

    loader = UserDataLoader(identity, FlakyGateway({"mood_entries", "check_ins"}))
    user = loader.load()

    assert user["mood_history"] == []
    assert user["last_check_in"] is None
    assert [e.energy for e in user["energy_history"]] == [6]


def test_same_day_check_ins_upsert_daily_entries(gateway, make_identity) -> None:
    identity = make_identity("riley")
    loader = UserDataLoader(identity, gateway)
    loader.load()

    loader.add_check_in(7, 5, on_date=date(2024, 1, 1))
    user = loader.add_check_in(3, 8, on_date=date(2024, 1, 1))

    assert [(e.date, e.mood) for e in user["mood_history"]] == [(date(2024, 1, 1), 3)]
    assert [(e.date, e.energy) for e in user["energy_history"]] == [(date(2024, 1, 1), 8)]
    assert len(gateway.select("check_ins", {"user_id": identity.id})) == 2


def test_history_is_ordered_by_date(gateway, make_identity) -> None:
    loader = UserDataLoader(make_identity("riley"), gateway)
    loader.add_check_in(4, 4, on_date=date(2024, 1, 5))
    user = loader.add_check_in(9, 9, on_date=date(2024, 1, 2))

    assert [e.date for e in user["mood_history"]] == [date(2024, 1, 2), date(2024, 1, 5)]


def test_latest_check_in_is_most_recent(gateway, make_identity) -> None:
    identity = make_identity("morgan")
    gateway.insert("check_ins", {
        "user_id": identity.id,
        "mood": 2,
        "energy": 2,
        "tags": [],
        "created_at": datetime.utcnow() - timedelta(hours=1),
    })
    loader = UserDataLoader(identity, gateway)

    user = loader.add_check_in(8, 6, notes="<b>Great</b> day", tags=["work", " work ", "", "sleep"])

    latest = user["last_check_in"]
    assert (latest.mood, latest.energy) == (8, 6)
    assert latest.notes == "Great day"
    assert latest.tags == ["work", "sleep"]


def test_update_user_writes_only_given_fields(gateway, make_identity) -> None:
    identity = make_identity("taylor")
    loader = UserDataLoader(identity, gateway)
    loader.load()

    user = loader.update_user(mode="team")

    assert user["profile"].mode is Mode.TEAM
    stored = gateway.select_one("users", {"id": identity.id})
    assert stored.mode is Mode.TEAM
    assert stored.name == "taylor"
    assert stored.daily_reminder_time == "09:00"


def test_update_user_rejects_unknown_fields(gateway, make_identity) -> None:
    loader = UserDataLoader(make_identity("taylor"), gateway)
    loader.load()
    with pytest.raises(ValueError):
        loader.update_user(email="x@example.com")


def test_update_user_rejects_name_that_is_only_markup(gateway, make_identity) -> None:
    identity = make_identity("taylor")
    loader = UserDataLoader(identity, gateway)
    loader.load()

    with pytest.raises(ValidationError):
        loader.update_user(name="<b></b>")

    assert gateway.select_one("users", {"id": identity.id}).name == "taylor"
    assert loader.user["profile"].name == "taylor"


def test_journal_crud_is_scoped_to_owner(gateway, make_identity) -> None:
    owner = UserDataLoader(make_identity("avery"), gateway)
    other = UserDataLoader(make_identity("blake"), gateway)
    owner.load()
    other.load()

    user = owner.add_journal_entry("Monday", "Long day", 4, tags=["work"])
    entry_id = user["journal_entries"][0].id

    with pytest.raises(NotFoundError):
        other.update_journal_entry(entry_id, title="Hijacked")
    with pytest.raises(NotFoundError):
        other.delete_journal_entry(entry_id)

    user = owner.update_journal_entry(entry_id, title="Monday again", mood=6)
    entry = user["journal_entries"][0]
    assert (entry.title, entry.content, entry.mood) == ("Monday again", "Long day", 6)

    user = owner.delete_journal_entry(entry_id)
    assert user["journal_entries"] == []


def test_journal_entries_newest_first(gateway, make_identity) -> None:
    identity = make_identity("avery")
    gateway.insert("journal_entries", {
        "user_id": identity.id,
        "title": "Older",
        "content": "...",
        "mood": 5,
        "tags": [],
        "created_at": datetime.utcnow() - timedelta(days=1),
    })
    loader = UserDataLoader(identity, gateway)

    user = loader.add_journal_entry("Newer", "...", 6)

    assert [e.title for e in user["journal_entries"]] == ["Newer", "Older"]
