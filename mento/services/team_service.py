"""Team membership: listing, creating, joining and leaving teams.

A ``TeamManager`` is bound to one identity. It keeps the list of teams
that identity belongs to, with each team's roster denormalised with
member display names, plus a single selected ``current_team``. Every
mutation reloads the full list afterwards.

Errors are logged and then re-raised so the caller can show them:
``ValidationError`` for empty input, ``NotFoundError`` for unknown
codes or teams, ``ConflictError`` for duplicate memberships and
``GatewayError`` when the store itself fails.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Optional

from ..errors import ConflictError, GatewayError, NotFoundError, ValidationError
from ..gateway import DataGateway
from ..identity import Identity
from ..models import TeamRole
from ..util.sanitization import normalize_room_code, strip_tags
from .metrics_service import mood_emoji, team_pulse

logger = logging.getLogger(__name__)


def build_invite_link(origin: str, team_id: str) -> str:
    """Return the shareable ``<origin>/invite/<team_id>`` URL."""
    return f"{origin.rstrip('/')}/invite/{team_id}"


class TeamManager:
    """Teams of one identity and the currently selected team."""

    def __init__(
        self,
        identity: Optional[Identity],
        gateway: Optional[DataGateway] = None,
        origin: str = "",
    ) -> None:
        self.identity = identity
        self.gateway = gateway or DataGateway()
        self.origin = origin
        self.teams: list[dict[str, Any]] = []
        self.current_team: Optional[dict[str, Any]] = None
        self.loading = identity is not None

    def load_user_teams(self) -> list[dict[str, Any]]:
        """Load every team the identity belongs to, with full rosters.

        Teams come back in the order the identity joined them and the
        first one becomes ``current_team``. Memberships, teams, rosters
        and member names are each fetched with a single query.
        """
        if self.identity is None:
            self.teams = []
            self.current_team = None
            self.loading = False
            return self.teams

        self.loading = True
        try:
            memberships = self.gateway.select(
                "team_members", {"user_id": self.identity.id}, order=["joined_at"]
            )
            team_ids = [m.team_id for m in memberships]
            if team_ids:
                teams = {t.id: t for t in self.gateway.select("teams", {"id": team_ids})}
                roster = self.gateway.select("team_members", {"team_id": team_ids}, order=["joined_at"])
                names = {
                    u.id: u.name
                    for u in self.gateway.select("users", {"id": {m.user_id for m in roster}})
                }
            else:
                teams, roster, names = {}, [], {}
        except GatewayError:
            logger.error("Error loading teams for %s", self.identity.id, exc_info=True)
            raise
        finally:
            self.loading = False

        members_by_team: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for member in roster:
            # Members without a profile row are not shown.
            if member.user_id not in names:
                continue
            members_by_team[member.team_id].append({
                "id": member.id,
                "user_id": member.user_id,
                "name": names[member.user_id],
                "role": member.role,
                "joined_at": member.joined_at,
            })

        self.teams = [
            self._team_view(teams[team_id], members_by_team[team_id])
            for team_id in team_ids
            if team_id in teams
        ]
        self.current_team = self.teams[0] if self.teams else None
        return self.teams

    refresh = load_user_teams

    def select_team(self, team_id: str) -> dict[str, Any]:
        for team in self.teams:
            if team["id"] == team_id:
                self.current_team = team
                return team
        raise NotFoundError("Team not found.")

    def create_team(self, name: str) -> dict[str, Any]:
        """Create a team owned by the identity and return it.

        The team row and the owner's membership row are written in one
        transaction, so a failure cannot leave a team without an owner.
        """
        self._require_identity()
        name = strip_tags(name)
        if not name:
            raise ValidationError("Please enter a team name.", fields={"name": ["Required."]})
        try:
            room_code = self.gateway.rpc("generate_room_code")
            if not room_code:
                raise GatewayError("Failed to generate room code.")
            with self.gateway.atomic():
                team = self.gateway.insert("teams", {
                    "name": name,
                    "room_code": room_code,
                    "created_by": self.identity.id,
                })
                self.gateway.insert("team_members", {
                    "team_id": team.id,
                    "user_id": self.identity.id,
                    "role": TeamRole.OWNER,
                })
        except (GatewayError, ConflictError):
            logger.error("Error creating team %r", name, exc_info=True)
            raise
        logger.info("Team %s created by %s", team.id, self.identity.id)
        self.load_user_teams()
        return self._find(team.id)

    def join_team(self, room_code: str) -> dict[str, Any]:
        """Join the team whose room code matches ``room_code``.

        The code is trimmed and upper-cased before the lookup.
        """
        self._require_identity()
        code = normalize_room_code(room_code)
        if not code:
            raise ValidationError("Please enter a room code.", fields={"room_code": ["Required."]})
        team = self._lookup("teams", {"room_code": code})
        if team is None:
            raise NotFoundError("Invalid room code")
        return self._add_member(team)

    def join_team_by_invite(self, team_id: str) -> dict[str, Any]:
        """Join a team from an invite link, keyed by its id."""
        self._require_identity()
        team = self._lookup("teams", {"id": team_id})
        if team is None:
            raise NotFoundError("Team not found.")
        return self._add_member(team)

    def leave_team(self, team_id: str) -> list[dict[str, Any]]:
        """Remove the identity from a team and reload.

        When the owner leaves, the earliest-joined remaining member
        becomes the new owner.
        """
        self._require_identity()
        membership = self._lookup("team_members", {"team_id": team_id, "user_id": self.identity.id})
        if membership is None:
            raise NotFoundError("You are not a member of this team.")
        was_owner = membership.role == TeamRole.OWNER
        try:
            with self.gateway.atomic():
                self.gateway.delete("team_members", {"id": membership.id})
                if was_owner:
                    successor = self.gateway.select_one(
                        "team_members", {"team_id": team_id}, order=["joined_at"]
                    )
                    if successor is not None:
                        self.gateway.update(
                            "team_members", {"role": TeamRole.OWNER}, {"id": successor.id}
                        )
                        logger.info("Ownership of team %s passed to %s", team_id, successor.user_id)
        except (GatewayError, ConflictError):
            logger.error("Error leaving team %s", team_id, exc_info=True)
            raise
        return self.load_user_teams()

    def generate_invite_link(self, team_id: str) -> str:
        return build_invite_link(self.origin, team_id)

    def load_team_pulse(self, team_id: Optional[str] = None) -> dict[str, Any]:
        """Aggregate the latest check-in of every member of a team.

        Uses ``current_team`` when ``team_id`` is not given. Members who
        have never checked in are listed with ``None`` scores.
        """
        team = self.select_team(team_id) if team_id else self.current_team
        if team is None:
            raise NotFoundError("No team selected.")
        latest: dict[str, Any] = {}
        try:
            for member in team["members"]:
                latest[member["user_id"]] = self.gateway.select_one(
                    "check_ins", {"user_id": member["user_id"]}, order=["-created_at"]
                )
        except GatewayError:
            logger.error("Error loading check-ins for team %s", team["id"], exc_info=True)
            raise

        members = []
        for member in team["members"]:
            check_in = latest[member["user_id"]]
            mood = check_in.mood if check_in else None
            members.append({
                "user_id": member["user_id"],
                "name": member["name"],
                "role": member["role"],
                "mood": mood,
                "energy": check_in.energy if check_in else None,
                "mood_emoji": mood_emoji(mood) if mood is not None else None,
            })
        pulse = team_pulse(members)
        pulse["team_id"] = team["id"]
        pulse["members"] = members
        return pulse

    # -- helpers ---------------------------------------------------------

    def _require_identity(self) -> None:
        if self.identity is None:
            raise PermissionError("User not authenticated")

    def _lookup(self, collection: str, filters: dict[str, Any]):
        try:
            return self.gateway.select_one(collection, filters)
        except GatewayError:
            logger.error("Error reading %s", collection, exc_info=True)
            raise

    def _add_member(self, team) -> dict[str, Any]:
        existing = self._lookup("team_members", {"team_id": team.id, "user_id": self.identity.id})
        if existing is not None:
            raise ConflictError("You are already a member of this team")
        try:
            self.gateway.insert("team_members", {
                "team_id": team.id,
                "user_id": self.identity.id,
                "role": TeamRole.MEMBER,
            })
        except (GatewayError, ConflictError):
            logger.error("Error joining team %s", team.id, exc_info=True)
            raise
        logger.info("%s joined team %s", self.identity.id, team.id)
        self.load_user_teams()
        return self._find(team.id)

    def _find(self, team_id: str) -> dict[str, Any]:
        for team in self.teams:
            if team["id"] == team_id:
                return team
        raise NotFoundError("Team not found.")

    @staticmethod
    def _team_view(team, members: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "id": team.id,
            "name": team.name,
            "room_code": team.room_code,
            "created_by": team.created_by,
            "created_at": team.created_at,
            "members": members,
        }
