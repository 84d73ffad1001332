"""Shared pytest fixtures.

Every test gets a fresh app built by ``create_app`` with an in-memory
SQLite database, so tests never share rows.
"""
from __future__ import annotations

import uuid

import pytest
from flask_jwt_extended import create_access_token

from mento import create_app, db
from mento.gateway import DataGateway
from mento.identity import Identity
from mento.services import UserDataLoader

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-secret-key-that-is-long-enough-for-hs256",
    "APP_ORIGIN": "https://app.example.com",
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app) -> DataGateway:
    return DataGateway()


@pytest.fixture
def make_identity(gateway):
    """Return a factory for identities that already have a profile."""

    def _make(local_part: str, with_profile: bool = True) -> Identity:
        identity = Identity(str(uuid.uuid4()), f"{local_part}@example.com")
        if with_profile:
            UserDataLoader(identity, gateway).ensure_profile()
        return identity

    return _make


@pytest.fixture
def auth_headers(app):
    """Return a factory for Authorization headers of an identity."""

    def _headers(identity: Identity) -> dict[str, str]:
        token = create_access_token(identity=identity.id, additional_claims={"email": identity.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers
