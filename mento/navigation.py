"""Screens of the app and the data each one needs.

The client holds the current ``View`` itself and asks for the payload
of one screen at a time; the server keeps no navigation state.
"""
from __future__ import annotations

import enum
from typing import Any

from .errors import GatewayError, ValidationError
from .schemas import (
    CheckInSchema,
    EnergyEntrySchema,
    JournalEntrySchema,
    MoodEntrySchema,
    TeamViewSchema,
    UserSchema,
    UserSnapshotSchema,
)
from .services import TeamManager, UserDataLoader


class View(enum.Enum):
    LANDING = "landing"
    DASHBOARD = "dashboard"
    CHECKIN = "checkin"
    TEAM = "team"
    SETTINGS = "settings"
    HISTORY = "history"
    JOURNAL = "journal"
    MENTO = "mento"


def resolve_view(name: str) -> View:
    try:
        return View(name.lower())
    except ValueError:
        choices = ", ".join(v.value for v in View)
        raise ValidationError(f"Unknown view {name!r}. Choose one of: {choices}.") from None


def render_view(view: View, loader: UserDataLoader, teams: TeamManager) -> dict[str, Any]:
    """Build the JSON payload for ``view``."""
    payload: dict[str, Any] = {"view": view.value}
    if view is View.LANDING:
        return payload

    if view is View.TEAM:
        teams.load_user_teams()
        payload["teams"] = TeamViewSchema(many=True).dump(teams.teams)
        payload["current_team"] = (
            TeamViewSchema().dump(teams.current_team) if teams.current_team else None
        )
        return payload

    user = loader.load()
    if user is None:
        raise GatewayError("User profile could not be loaded.")

    if view is View.DASHBOARD:
        payload["user"] = UserSnapshotSchema().dump(user)
    elif view is View.CHECKIN:
        payload["last_check_in"] = (
            CheckInSchema().dump(user["last_check_in"]) if user["last_check_in"] else None
        )
    elif view is View.SETTINGS:
        payload["profile"] = UserSchema().dump(user["profile"])
    elif view is View.HISTORY:
        payload["mood_history"] = MoodEntrySchema(many=True, only=("date", "mood")).dump(user["mood_history"])
        payload["energy_history"] = EnergyEntrySchema(many=True, only=("date", "energy")).dump(
            user["energy_history"]
        )
    elif view is View.JOURNAL:
        payload["journal_entries"] = JournalEntrySchema(many=True).dump(user["journal_entries"])
    elif view is View.MENTO:
        payload["profile"] = UserSchema().dump(user["profile"])
        payload["last_check_in"] = (
            CheckInSchema().dump(user["last_check_in"]) if user["last_check_in"] else None
        )
    return payload
