"""
Routes for the signed-in user's own data.

``GET /me`` returns the full snapshot (profile, latest check-in, mood
and energy history, journal). The profile is created on first access.
Check-ins are posted here too; each one records the day's mood and
energy and the refreshed snapshot is returned.
"""

from __future__ import annotations

from dateutil.parser import parse as parse_date  # type: ignore

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from ..errors import GatewayError, ValidationError
from ..identity import current_identity
from ..schemas import CheckInInputSchema, ProfileUpdateInputSchema, UserSnapshotSchema
from ..services import UserDataLoader


profile_bp = Blueprint("profile", __name__)


def _loaded() -> UserDataLoader:
    """Return a loader for the current identity with its snapshot loaded."""
    loader = UserDataLoader(current_identity())
    if loader.load() is None:
        raise GatewayError("User profile could not be loaded.")
    return loader


@profile_bp.route("/me", methods=["GET"])
@jwt_required()
def get_me() -> tuple[dict, int]:
    return UserSnapshotSchema().dump(_loaded().user), 200


@profile_bp.route("/me", methods=["PATCH"])
@jwt_required()
def update_me() -> tuple[dict, int]:
    """Update ``name``, ``mode`` and/or ``daily_reminder_time``.

    Only the fields present in the body are written.
    """
    data = ProfileUpdateInputSchema().load(request.get_json() or {})
    loader = _loaded()
    loader.update_user(**data)
    return UserSnapshotSchema().dump(loader.user), 200


@profile_bp.route("/me/check-ins", methods=["POST"])
@jwt_required()
def create_check_in() -> tuple[dict, int]:
    """Log a check-in.

    Accepts ``mood`` and ``energy`` (0-10), optional ``notes`` and
    ``tags``, and an optional ISO ``date`` for the daily entries
    (defaults to today).
    """
    data = CheckInInputSchema().load(request.get_json() or {})
    on_date = None
    if data.get("date"):
        try:
            on_date = parse_date(data["date"]).date()
        except (ValueError, OverflowError):
            raise ValidationError(
                "Invalid date format. Use ISO 8601 (YYYY-MM-DD).", fields={"date": ["Invalid date."]}
            ) from None
    loader = _loaded()
    loader.add_check_in(
        data["mood"], data["energy"], notes=data.get("notes"), tags=data["tags"], on_date=on_date
    )
    return UserSnapshotSchema().dump(loader.user), 201
