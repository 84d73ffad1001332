"""
Routes for journal entries.

Entries are only ever touched through the owner's id, so an entry id
belonging to someone else behaves exactly like a missing one (404).
Each mutation returns the refreshed list of the user's entries, newest
first.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from ..errors import GatewayError
from ..identity import current_identity
from ..schemas import JournalEntryInputSchema, JournalEntrySchema
from ..services import UserDataLoader


journal_bp = Blueprint("journal", __name__)


def _loaded() -> UserDataLoader:
    loader = UserDataLoader(current_identity())
    if loader.load() is None:
        raise GatewayError("User profile could not be loaded.")
    return loader


def _entries(loader: UserDataLoader) -> list[dict]:
    return JournalEntrySchema(many=True).dump(loader.user["journal_entries"])


@journal_bp.route("/me/journal", methods=["GET"])
@jwt_required()
def list_entries() -> tuple[list[dict], int]:
    return _entries(_loaded()), 200


@journal_bp.route("/me/journal", methods=["POST"])
@jwt_required()
def create_entry() -> tuple[list[dict], int]:
    """Create an entry from ``title``, ``content``, ``mood`` and ``tags``."""
    data = JournalEntryInputSchema().load(request.get_json() or {})
    loader = _loaded()
    loader.add_journal_entry(data["title"], data["content"], data["mood"], tags=data["tags"])
    return _entries(loader), 201


@journal_bp.route("/me/journal/<entry_id>", methods=["PUT"])
@jwt_required()
def update_entry(entry_id: str) -> tuple[list[dict], int]:
    """Update any subset of ``title``, ``content``, ``mood`` and ``tags``."""
    data = JournalEntryInputSchema(partial=True).load(request.get_json() or {})
    loader = _loaded()
    loader.update_journal_entry(entry_id, **data)
    return _entries(loader), 200


@journal_bp.route("/me/journal/<entry_id>", methods=["DELETE"])
@jwt_required()
def delete_entry(entry_id: str) -> tuple[list[dict], int]:
    loader = _loaded()
    loader.delete_journal_entry(entry_id)
    return _entries(loader), 200
