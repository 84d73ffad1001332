"""Service layer for Mento Sync.

This package contains the logic that sits between the Flask route
handlers and the data gateway. Nothing here performs HTTP handling:
services return plain Python data structures or model rows, and raise
exceptions defined in ``mento.errors`` when something goes wrong.
"""

from .metrics_service import average_mood, energy_sync, mood_emoji, team_pulse
from .team_service import TeamManager, build_invite_link
from .user_data_service import UserDataLoader

__all__ = [
    "average_mood",
    "energy_sync",
    "mood_emoji",
    "team_pulse",
    "TeamManager",
    "build_invite_link",
    "UserDataLoader",
]
