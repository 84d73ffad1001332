"""
Database models for Mento Sync.

Accounts hold sign-in credentials, while ``User`` rows carry the
profile shown in the app (one per account, created lazily). Check-ins
form an append-only log; the daily ``MoodEntry`` and ``EnergyEntry``
tables keep one value per user per day and back the history charts.
Teams are joined through ``TeamMember`` rows, exactly one of which is
the team owner.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, date
from typing import Optional, List

from werkzeug.security import generate_password_hash, check_password_hash

from . import db


def _new_id() -> str:
    return str(uuid.uuid4())


class Mode(enum.Enum):
    """Whether a user tracks on their own or with a team."""
    SOLO = "solo"
    TEAM = "team"


class TeamRole(enum.Enum):
    """Role of a member within a team."""
    OWNER = "owner"
    MEMBER = "member"


class Account(db.Model):
    __allow_unmapped__ = True  # allow unmapped type annotations for SQLAlchemy 2.0
    """Sign-in identity. Passwords are stored as salted hashes."""
    __tablename__ = "accounts"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    email: str = db.Column(db.String(120), unique=True, nullable=False)
    password_hash: str = db.Column(db.String(256), nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def __repr__(self) -> str:
        return f"<Account {self.email}>"


class User(db.Model):
    __allow_unmapped__ = True
    """Profile of a signed-in user; ``id`` matches the account id."""
    __tablename__ = "users"

    id: str = db.Column(db.String(36), primary_key=True)
    name: str = db.Column(db.String(100), nullable=False)
    mode: Mode = db.Column(db.Enum(Mode), default=Mode.SOLO, nullable=False)
    daily_reminder_time: str = db.Column(db.String(5), nullable=False, default="09:00")
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<User {self.name} ({self.mode.value})>"


class MoodEntry(db.Model):
    __allow_unmapped__ = True
    """Mood score for a single day."""
    __tablename__ = "mood_entries"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    date: date = db.Column(db.Date, nullable=False)
    mood: int = db.Column(db.Integer, nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uix_mood_user_date"),
    )

    def __repr__(self) -> str:
        return f"<MoodEntry {self.user_id} {self.date} mood={self.mood}>"


class EnergyEntry(db.Model):
    __allow_unmapped__ = True
    """Energy score for a single day."""
    __tablename__ = "energy_entries"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    date: date = db.Column(db.Date, nullable=False)
    energy: int = db.Column(db.Integer, nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "date", name="uix_energy_user_date"),
    )

    def __repr__(self) -> str:
        return f"<EnergyEntry {self.user_id} {self.date} energy={self.energy}>"


class CheckIn(db.Model):
    __allow_unmapped__ = True
    """A logged mood/energy check-in. Rows are never updated."""
    __tablename__ = "check_ins"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    mood: int = db.Column(db.Integer, nullable=False)
    energy: int = db.Column(db.Integer, nullable=False)
    notes: Optional[str] = db.Column(db.Text)
    tags: List[str] = db.Column(db.JSON, nullable=False, default=list)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self) -> str:
        return f"<CheckIn {self.user_id} mood={self.mood} energy={self.energy}>"


class JournalEntry(db.Model):
    __allow_unmapped__ = True
    """Free-form journal entry owned by a single user."""
    __tablename__ = "journal_entries"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    title: str = db.Column(db.String(200), nullable=False)
    content: str = db.Column(db.Text, nullable=False)
    mood: int = db.Column(db.Integer, nullable=False)
    tags: List[str] = db.Column(db.JSON, nullable=False, default=list)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at: datetime = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def __repr__(self) -> str:
        return f"<JournalEntry {self.title!r}>"


class Team(db.Model):
    __allow_unmapped__ = True
    """A team that users join with its room code or an invite link."""
    __tablename__ = "teams"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    name: str = db.Column(db.String(100), nullable=False)
    room_code: str = db.Column(db.String(6), unique=True, nullable=False)
    created_by: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    created_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Team {self.name} [{self.room_code}]>"


class TeamMember(db.Model):
    __allow_unmapped__ = True
    """Membership of a user in a team."""
    __tablename__ = "team_members"

    id: str = db.Column(db.String(36), primary_key=True, default=_new_id)
    team_id: str = db.Column(db.String(36), db.ForeignKey("teams.id"), nullable=False, index=True)
    user_id: str = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    role: TeamRole = db.Column(db.Enum(TeamRole), default=TeamRole.MEMBER, nullable=False)
    joined_at: datetime = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    # A user may only hold one membership per team
    __table_args__ = (
        db.UniqueConstraint("team_id", "user_id", name="uix_team_user"),
    )

    def __repr__(self) -> str:
        return f"<TeamMember team={self.team_id} user={self.user_id} ({self.role.value})>"
