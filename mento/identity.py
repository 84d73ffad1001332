"""The authenticated identity behind a request."""
from __future__ import annotations

from typing import Optional

from flask_jwt_extended import get_jwt, get_jwt_identity


class Identity:
    """Account id and email taken from a verified access token."""

    def __init__(self, id: str, email: Optional[str] = None) -> None:
        self.id = id
        self.email = email

    @property
    def default_name(self) -> str:
        """Display name used for a freshly created profile."""
        if self.email and self.email.split("@")[0]:
            return self.email.split("@")[0]
        return "User"

    def __repr__(self) -> str:
        return f"<Identity {self.id}>"


def current_identity() -> Identity:
    """Build an :class:`Identity` from the JWT of the current request.

    Must be called from a view protected by ``jwt_required``.
    """
    return Identity(get_jwt_identity(), get_jwt().get("email"))
