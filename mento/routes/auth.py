"""
Authentication routes for Mento Sync.

Provides endpoints for registering accounts and logging in to obtain
JSON Web Tokens (JWTs). The token's subject is the account id and it
carries the email as an extra claim, which is used to name the profile
created on first load.
"""

from __future__ import annotations

from flask import Blueprint, request
from flask_jwt_extended import create_access_token

from .. import db
from ..models import Account
from ..schemas import AccountSchema, CredentialsInputSchema


auth_bp = Blueprint("auth", __name__)


def _token_for(account: Account) -> str:
    return create_access_token(identity=account.id, additional_claims={"email": account.email})


@auth_bp.route("/register", methods=["POST"])
def register() -> tuple[dict, int]:
    """Register a new account.

    Expects JSON with ``email`` and ``password``. Emails must be
    unique. Returns the account together with an access token so the
    client is signed in straight away.
    """
    data = CredentialsInputSchema().load(request.get_json() or {})
    email = data["email"].strip().lower()
    if Account.query.filter_by(email=email).first():
        return {"error": "A user with that email already exists."}, 409

    account = Account(email=email)
    account.set_password(data["password"])
    db.session.add(account)
    db.session.commit()
    return {"access_token": _token_for(account), "account": AccountSchema().dump(account)}, 201


@auth_bp.route("/login", methods=["POST"])
def login() -> tuple[dict, int]:
    """Authenticate an account and return a JWT.

    Invalid credentials return 401.
    """
    data = request.get_json() or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    account = Account.query.filter_by(email=email).first()
    if not account or not account.check_password(password):
        return {"error": "Invalid email or password."}, 401

    return {"access_token": _token_for(account), "account": AccountSchema().dump(account)}, 200
