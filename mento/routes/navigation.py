"""
Screen payloads and invite links.

``/api/views/<view>`` returns what one screen of the app needs, so the
client only tracks which screen is showing. ``/invite/<team_id>`` is
the target of shared invite links: a signed-in visitor joins the team
and is sent back to the root of the web client at ``APP_ORIGIN``.
"""

from __future__ import annotations

from flask import Blueprint, current_app, redirect
from flask_jwt_extended import jwt_required

from ..errors import GatewayError
from ..identity import current_identity
from ..navigation import render_view, resolve_view
from ..services import TeamManager, UserDataLoader


navigation_bp = Blueprint("navigation", __name__)
invite_bp = Blueprint("invite", __name__)


@navigation_bp.route("/views/<view_name>", methods=["GET"])
@jwt_required()
def show_view(view_name: str) -> tuple[dict, int]:
    view = resolve_view(view_name)
    identity = current_identity()
    loader = UserDataLoader(identity)
    teams = TeamManager(identity, origin=current_app.config["APP_ORIGIN"])
    return render_view(view, loader, teams), 200


@invite_bp.route("/invite/<team_id>", methods=["GET"])
@jwt_required()
def accept_invite(team_id: str):
    """Join ``team_id`` and redirect to the web client root."""
    identity = current_identity()
    # The visitor needs a profile to show up in the roster.
    if UserDataLoader(identity).ensure_profile() is None:
        raise GatewayError("User profile could not be loaded.")
    TeamManager(identity).join_team_by_invite(team_id)
    return redirect(current_app.config["APP_ORIGIN"].rstrip("/") + "/")
