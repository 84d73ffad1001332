"""Loading and mutating everything the app shows about one user.

``UserDataLoader`` combines several gateway reads into one snapshot:
the profile, the latest check-in, the full mood and energy series and
the journal. Reads favour availability: if the profile cannot be read
or created the snapshot stays ``None``, but a failure in any of the
later reads only empties that part of the snapshot.

Mutations are written through the gateway and then followed by a full
reload, except for profile updates which are merged into the local
snapshot directly.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Optional

from ..errors import ConflictError, GatewayError, NotFoundError, ValidationError
from ..gateway import DataGateway
from ..identity import Identity
from ..models import Mode
from ..util.sanitization import normalize_tags, strip_tags

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_TIME = "09:00"
PROFILE_FIELDS = ("name", "mode", "daily_reminder_time")
JOURNAL_FIELDS = ("title", "content", "mood", "tags")


class UserDataLoader:
    """Per-identity view of profile, check-ins, history and journal."""

    def __init__(self, identity: Optional[Identity], gateway: Optional[DataGateway] = None) -> None:
        self.identity = identity
        self.gateway = gateway or DataGateway()
        self.user: Optional[dict[str, Any]] = None
        self.loading = identity is not None

    def load(self) -> Optional[dict[str, Any]]:
        """Load (or reload) the snapshot for the current identity."""
        if self.identity is None:
            self.user = None
            self.loading = False
            return None

        self.loading = True
        try:
            profile = self.ensure_profile()
            if profile is None:
                return None
            user_id = self.identity.id
            check_ins = self._read("check_ins", {"user_id": user_id}, ["-created_at"], limit=1)
            self.user = {
                "profile": profile,
                "last_check_in": check_ins[0] if check_ins else None,
                "mood_history": self._read("mood_entries", {"user_id": user_id}, ["date"]),
                "energy_history": self._read("energy_entries", {"user_id": user_id}, ["date"]),
                "journal_entries": self._read("journal_entries", {"user_id": user_id}, ["-created_at"]),
            }
            return self.user
        finally:
            self.loading = False

    refresh = load

    def update_user(self, **updates: Any) -> Optional[dict[str, Any]]:
        """Write the provided profile fields and merge them locally.

        Only ``name``, ``mode`` and ``daily_reminder_time`` are accepted;
        keys that are absent are left untouched.
        """
        if self.identity is None or self.user is None:
            return None
        unknown = set(updates) - set(PROFILE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        fields = {key: value for key, value in updates.items() if value is not None}
        if "mode" in fields and not isinstance(fields["mode"], Mode):
            fields["mode"] = Mode(fields["mode"])
        if "name" in fields:
            fields["name"] = strip_tags(fields["name"])
            if not fields["name"]:
                raise ValidationError("Please enter a name.", fields={"name": ["Required."]})
        if fields:
            try:
                self.gateway.update("users", fields, {"id": self.identity.id})
            except (GatewayError, ConflictError):
                logger.error("Error updating profile for %s", self.identity.id, exc_info=True)
                raise
            profile = self.user["profile"]
            for key, value in fields.items():
                setattr(profile, key, value)
        return self.user

    def add_check_in(
        self,
        mood: int,
        energy: int,
        notes: Optional[str] = None,
        tags: Optional[list[str]] = None,
        on_date: Optional[date] = None,
    ) -> Optional[dict[str, Any]]:
        """Log a check-in and record the day's mood and energy.

        The check-in row is always appended. The ``MoodEntry`` and
        ``EnergyEntry`` for ``on_date`` (today, UTC, by default) are
        updated if they exist and inserted otherwise.
        """
        if self.identity is None:
            return None
        day = on_date or datetime.utcnow().date()
        user_id = self.identity.id
        try:
            with self.gateway.atomic():
                self.gateway.insert("check_ins", {
                    "user_id": user_id,
                    "mood": mood,
                    "energy": energy,
                    "notes": strip_tags(notes) or None,
                    "tags": normalize_tags(tags),
                })
                self._upsert_daily("mood_entries", "mood", mood, day)
                self._upsert_daily("energy_entries", "energy", energy, day)
        except (GatewayError, ConflictError):
            logger.error("Error adding check-in for %s", user_id, exc_info=True)
            raise
        return self.load()

    def add_journal_entry(
        self, title: str, content: str, mood: int, tags: Optional[list[str]] = None
    ) -> Optional[dict[str, Any]]:
        if self.identity is None:
            return None
        try:
            self.gateway.insert("journal_entries", {
                "user_id": self.identity.id,
                "title": strip_tags(title),
                "content": strip_tags(content),
                "mood": mood,
                "tags": normalize_tags(tags),
            })
        except (GatewayError, ConflictError):
            logger.error("Error adding journal entry for %s", self.identity.id, exc_info=True)
            raise
        return self.load()

    def update_journal_entry(self, entry_id: str, **updates: Any) -> Optional[dict[str, Any]]:
        """Update one of the identity's journal entries.

        Raises ``NotFoundError`` when no entry with ``entry_id`` belongs
        to the identity.
        """
        if self.identity is None:
            return None
        fields = {key: updates[key] for key in JOURNAL_FIELDS if updates.get(key) is not None}
        for key in ("title", "content"):
            if key in fields:
                fields[key] = strip_tags(fields[key])
        if "tags" in fields:
            fields["tags"] = normalize_tags(fields["tags"])
        if fields:
            fields["updated_at"] = datetime.utcnow()
            try:
                count = self.gateway.update(
                    "journal_entries", fields, {"id": entry_id, "user_id": self.identity.id}
                )
            except (GatewayError, ConflictError):
                logger.error("Error updating journal entry %s", entry_id, exc_info=True)
                raise
            if not count:
                raise NotFoundError("Journal entry not found.")
        return self.load()

    def delete_journal_entry(self, entry_id: str) -> Optional[dict[str, Any]]:
        if self.identity is None:
            return None
        try:
            count = self.gateway.delete(
                "journal_entries", {"id": entry_id, "user_id": self.identity.id}
            )
        except GatewayError:
            logger.error("Error deleting journal entry %s", entry_id, exc_info=True)
            raise
        if not count:
            raise NotFoundError("Journal entry not found.")
        return self.load()

    def ensure_profile(self):
        """Return the identity's profile, creating a default one if absent."""
        try:
            profile = self.gateway.select_one("users", {"id": self.identity.id})
            if profile is None:
                profile = self.gateway.insert("users", {
                    "id": self.identity.id,
                    "name": self.identity.default_name,
                    "mode": Mode.SOLO,
                    "daily_reminder_time": DEFAULT_REMINDER_TIME,
                })
                logger.info("Created default profile for %s", self.identity.id)
        except (GatewayError, ConflictError):
            logger.error("Error creating user profile for %s", self.identity.id, exc_info=True)
            return None
        return profile

    # -- helpers ---------------------------------------------------------

    def _read(self, collection: str, filters: dict, order: list[str], limit: Optional[int] = None) -> list:
        try:
            return self.gateway.select(collection, filters, order=order, limit=limit)
        except GatewayError:
            logger.warning("Error loading %s for %s", collection, self.identity.id, exc_info=True)
            return []

    def _upsert_daily(self, collection: str, field: str, value: int, day: date) -> None:
        filters = {"user_id": self.identity.id, "date": day}
        existing = self.gateway.select_one(collection, filters)
        if existing is not None:
            self.gateway.update(collection, {field: value}, {"id": existing.id})
        else:
            self.gateway.insert(collection, {**filters, field: value})
