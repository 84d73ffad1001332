"""Seed script for demo data.

Running this script creates two demo accounts with profiles, a week of
check-ins for each, and a shared team owned by the first account. It
can be executed with ``python -m seed.seed`` from the repository root.
"""
from __future__ import annotations

from datetime import datetime, timedelta

from mento import create_app, db
from mento.gateway import DataGateway
from mento.identity import Identity
from mento.models import Account
from mento.services import TeamManager, UserDataLoader

DEMO_ACCOUNTS = [
    ("alex@example.com", [7, 8, 6, 7, 9, 8, 7], [6, 7, 5, 6, 8, 7, 7]),
    ("sam@example.com", [5, 4, 6, 5, 7, 6, 6], [4, 5, 5, 6, 6, 5, 7]),
]


def run_seeds() -> None:
    """Insert demo accounts, check-ins and a team into the database."""
    app = create_app()
    with app.app_context():
        db.create_all()
        gateway = DataGateway()
        identities = []
        today = datetime.utcnow().date()
        for email, moods, energies in DEMO_ACCOUNTS:
            account = Account(email=email)
            account.set_password("password")
            db.session.add(account)
            db.session.commit()
            identity = Identity(account.id, account.email)
            identities.append(identity)

            loader = UserDataLoader(identity, gateway)
            loader.load()
            for offset, (mood, energy) in enumerate(zip(moods, energies)):
                day = today - timedelta(days=len(moods) - 1 - offset)
                loader.add_check_in(mood, energy, tags=["demo"], on_date=day)

        owner = TeamManager(identities[0], gateway)
        team = owner.create_team("Demo Team")
        TeamManager(identities[1], gateway).join_team(team["room_code"])
        print(f"Seed data inserted successfully. Room code: {team['room_code']}")


if __name__ == "__main__":
    run_seeds()
