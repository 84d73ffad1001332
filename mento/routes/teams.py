"""
Routes for teams and memberships.

Every response carries the caller's refreshed team list so clients
never need a second request after a mutation. Teams are joined either
with their six-character room code or by id through an invite link.
"""

from __future__ import annotations

from flask import Blueprint, current_app, request
from flask_jwt_extended import jwt_required

from ..errors import GatewayError
from ..identity import current_identity
from ..schemas import JoinTeamInputSchema, TeamCreateInputSchema, TeamPulseSchema, TeamViewSchema
from ..services import TeamManager, UserDataLoader


teams_bp = Blueprint("teams", __name__)


def _manager() -> TeamManager:
    """Return a manager for the current identity with its teams loaded."""
    identity = current_identity()
    # Team rows reference the profile, so make sure it exists first.
    if UserDataLoader(identity).ensure_profile() is None:
        raise GatewayError("User profile could not be loaded.")
    manager = TeamManager(identity, origin=current_app.config["APP_ORIGIN"])
    manager.load_user_teams()
    return manager


def _teams_payload(manager: TeamManager) -> dict:
    return {
        "teams": TeamViewSchema(many=True).dump(manager.teams),
        "current_team": TeamViewSchema().dump(manager.current_team) if manager.current_team else None,
    }


@teams_bp.route("/teams", methods=["GET"])
@jwt_required()
def list_teams() -> tuple[dict, int]:
    """List the caller's teams.

    Pass ``team_id`` to pick the current team; otherwise the first
    team joined is current.
    """
    manager = _manager()
    team_id = request.args.get("team_id")
    if team_id:
        manager.select_team(team_id)
    return _teams_payload(manager), 200


@teams_bp.route("/teams", methods=["POST"])
@jwt_required()
def create_team() -> tuple[dict, int]:
    """Create a team with the caller as owner. Expects ``name``."""
    data = TeamCreateInputSchema().load(request.get_json() or {})
    manager = _manager()
    team = manager.create_team(data["name"])
    return {"team": TeamViewSchema().dump(team), **_teams_payload(manager)}, 201


@teams_bp.route("/teams/join", methods=["POST"])
@jwt_required()
def join_team() -> tuple[dict, int]:
    """Join a team by ``room_code`` (case-insensitive)."""
    data = JoinTeamInputSchema().load(request.get_json() or {})
    manager = _manager()
    team = manager.join_team(data["room_code"])
    return {"team": TeamViewSchema().dump(team), **_teams_payload(manager)}, 201


@teams_bp.route("/teams/<team_id>/join", methods=["POST"])
@jwt_required()
def join_team_by_invite(team_id: str) -> tuple[dict, int]:
    manager = _manager()
    team = manager.join_team_by_invite(team_id)
    return {"team": TeamViewSchema().dump(team), **_teams_payload(manager)}, 201


@teams_bp.route("/teams/<team_id>/membership", methods=["DELETE"])
@jwt_required()
def leave_team(team_id: str) -> tuple[dict, int]:
    """Leave a team. An owner's role passes to the longest-standing member."""
    manager = _manager()
    manager.leave_team(team_id)
    return _teams_payload(manager), 200


@teams_bp.route("/teams/<team_id>/invite-link", methods=["GET"])
@jwt_required()
def invite_link(team_id: str) -> tuple[dict, int]:
    manager = _manager()
    team = manager.select_team(team_id)
    return {"room_code": team["room_code"], "invite_link": manager.generate_invite_link(team_id)}, 200


@teams_bp.route("/teams/<team_id>/pulse", methods=["GET"])
@jwt_required()
def team_pulse(team_id: str) -> tuple[dict, int]:
    """Return the team's average mood and energy sync.

    Figures come from each member's latest check-in.
    """
    manager = _manager()
    return TeamPulseSchema().dump(manager.load_team_pulse(team_id)), 200
