"""
Serialization schemas using Marshmallow for Mento Sync.

Auto schemas dump the SQLAlchemy models; the plain ``*InputSchema``
classes validate request bodies before they reach the service layer.
The loaded user snapshot and team views are plain dictionaries and get
their own schemas at the bottom of this module.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate
from marshmallow_sqlalchemy import SQLAlchemyAutoSchema

from .models import (
    Account,
    CheckIn,
    EnergyEntry,
    JournalEntry,
    Mode,
    MoodEntry,
    Team,
    TeamRole,
    User,
)

SCORE_RANGE = validate.Range(min=0, max=10)
REMINDER_TIME = validate.Regexp(r"^([01]\d|2[0-3]):[0-5]\d$", error="Use 24-hour HH:MM format.")


class AccountSchema(SQLAlchemyAutoSchema):
    """Schema for serialising ``Account`` objects."""

    class Meta:
        model = Account
        # Exclude password_hash from the serialised output
        exclude = ("password_hash",)


class UserSchema(SQLAlchemyAutoSchema):
    """Schema for serialising profiles."""

    mode = fields.Enum(Mode, by_value=True)

    class Meta:
        model = User


class MoodEntrySchema(SQLAlchemyAutoSchema):
    class Meta:
        model = MoodEntry
        include_fk = True


class EnergyEntrySchema(SQLAlchemyAutoSchema):
    class Meta:
        model = EnergyEntry
        include_fk = True


class CheckInSchema(SQLAlchemyAutoSchema):
    tags = fields.List(fields.String())

    class Meta:
        model = CheckIn
        include_fk = True


class JournalEntrySchema(SQLAlchemyAutoSchema):
    tags = fields.List(fields.String())

    class Meta:
        model = JournalEntry
        include_fk = True


class TeamRowSchema(SQLAlchemyAutoSchema):
    """Schema for a bare ``Team`` row, without its roster."""

    class Meta:
        model = Team
        include_fk = True


# -- request bodies -----------------------------------------------------

class CredentialsInputSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=6))


class ProfileUpdateInputSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    mode = fields.Enum(Mode, by_value=True)
    daily_reminder_time = fields.String(validate=REMINDER_TIME)


class CheckInInputSchema(Schema):
    mood = fields.Integer(required=True, validate=SCORE_RANGE)
    energy = fields.Integer(required=True, validate=SCORE_RANGE)
    notes = fields.String(allow_none=True, validate=validate.Length(max=2000))
    tags = fields.List(fields.String(validate=validate.Length(max=50)), load_default=list)
    # Parsed by the route with dateutil; kept as a string here.
    date = fields.String()


class JournalEntryInputSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    content = fields.String(required=True)
    mood = fields.Integer(required=True, validate=SCORE_RANGE)
    tags = fields.List(fields.String(validate=validate.Length(max=50)), load_default=list)


class TeamCreateInputSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class JoinTeamInputSchema(Schema):
    room_code = fields.String(required=True, validate=validate.Length(min=1))


# -- loaded views -------------------------------------------------------

class UserSnapshotSchema(Schema):
    """The denormalised user view assembled by ``UserDataLoader``."""

    profile = fields.Nested(UserSchema)
    last_check_in = fields.Nested(CheckInSchema, allow_none=True)
    mood_history = fields.Nested(MoodEntrySchema, many=True, only=("date", "mood"))
    energy_history = fields.Nested(EnergyEntrySchema, many=True, only=("date", "energy"))
    journal_entries = fields.Nested(JournalEntrySchema, many=True)


class TeamMemberViewSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    name = fields.String()
    role = fields.Enum(TeamRole, by_value=True)
    joined_at = fields.DateTime()


class TeamViewSchema(Schema):
    id = fields.String()
    name = fields.String()
    room_code = fields.String()
    created_by = fields.String()
    created_at = fields.DateTime()
    members = fields.Nested(TeamMemberViewSchema, many=True)


class MemberPulseSchema(Schema):
    user_id = fields.String()
    name = fields.String()
    role = fields.Enum(TeamRole, by_value=True)
    mood = fields.Integer(allow_none=True)
    energy = fields.Integer(allow_none=True)
    mood_emoji = fields.String(allow_none=True)


class TeamPulseSchema(Schema):
    team_id = fields.String()
    average_mood = fields.Integer(allow_none=True)
    mood_emoji = fields.String(allow_none=True)
    energy_sync = fields.Integer(allow_none=True)
    member_count = fields.Integer()
    checked_in_count = fields.Integer()
    message = fields.String(allow_none=True)
    members = fields.Nested(MemberPulseSchema, many=True)
