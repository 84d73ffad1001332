"""Thin data gateway over the relational store.

Services never build SQLAlchemy queries themselves. They address one of
the named collections below with simple equality filters, an ordering
and an optional limit, mirroring the select/insert/update/delete
surface of a hosted database API. The one server-side procedure,
``generate_room_code``, is exposed through :meth:`DataGateway.rpc`.

Every write commits immediately unless it runs inside
:meth:`DataGateway.atomic`, in which case the whole block commits once
and is rolled back if any step fails.
"""
from __future__ import annotations

import logging
import secrets
import string
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import db
from .errors import ConflictError, GatewayError
from .models import (
    CheckIn,
    EnergyEntry,
    JournalEntry,
    MoodEntry,
    Team,
    TeamMember,
    User,
)

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "users": User,
    "mood_entries": MoodEntry,
    "energy_entries": EnergyEntry,
    "check_ins": CheckIn,
    "journal_entries": JournalEntry,
    "teams": Team,
    "team_members": TeamMember,
}

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_ATTEMPTS = 20


class DataGateway:
    """CRUD access to the application's collections."""

    def __init__(self, session=None) -> None:
        self.session = session if session is not None else db.session
        self._atomic_depth = 0
        self._procedures = {"generate_room_code": self._generate_room_code}

    # -- reads -----------------------------------------------------------

    def select(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> list:
        """Return the rows of ``collection`` matching ``filters``.

        ``filters`` maps column names to values; a list, tuple or set
        value matches any of its members. ``order`` lists column names,
        prefixed with ``-`` for descending order.
        """
        model = self._model(collection)
        query = self._filtered(model, filters)
        for name in order or ():
            descending = name.startswith("-")
            column = self._column(model, name.lstrip("-"))
            query = query.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            query = query.limit(limit)
        try:
            return query.all()
        except SQLAlchemyError as exc:
            self._abort()
            raise GatewayError(f"Could not read {collection}.") from exc

    def select_one(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[Iterable[str]] = None,
    ):
        """Return the first matching row or ``None``."""
        rows = self.select(collection, filters, order=order, limit=1)
        return rows[0] if rows else None

    # -- writes ----------------------------------------------------------

    def insert(self, collection: str, record: dict[str, Any]):
        model = self._model(collection)
        instance = model(**record)
        self.session.add(instance)
        self._write(collection)
        return instance

    def update(self, collection: str, fields: dict[str, Any], filters: dict[str, Any]) -> int:
        """Apply ``fields`` to every matching row and return the row count."""
        if not filters:
            raise ValueError("update() requires at least one filter")
        model = self._model(collection)
        try:
            count = self._filtered(model, filters).update(fields, synchronize_session="fetch")
        except SQLAlchemyError as exc:
            self._abort()
            raise GatewayError(f"Could not update {collection}.") from exc
        self._write(collection)
        return count

    def delete(self, collection: str, filters: dict[str, Any]) -> int:
        if not filters:
            raise ValueError("delete() requires at least one filter")
        model = self._model(collection)
        try:
            count = self._filtered(model, filters).delete(synchronize_session="fetch")
        except SQLAlchemyError as exc:
            self._abort()
            raise GatewayError(f"Could not delete from {collection}.") from exc
        self._write(collection)
        return count

    def rpc(self, name: str, **params: Any) -> Any:
        """Invoke a named server-side procedure."""
        try:
            procedure = self._procedures[name]
        except KeyError:
            raise ValueError(f"Unknown procedure: {name}") from None
        return procedure(**params)

    @contextmanager
    def atomic(self) -> Iterator["DataGateway"]:
        """Group several writes into one transaction."""
        self._atomic_depth += 1
        try:
            yield self
        except Exception:
            self._atomic_depth -= 1
            if self._atomic_depth == 0:
                self.session.rollback()
            raise
        self._atomic_depth -= 1
        if self._atomic_depth == 0:
            self._commit("transaction")

    # -- internals -------------------------------------------------------

    def _model(self, collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None

    @staticmethod
    def _column(model, name: str):
        column = getattr(model, name, None)
        if column is None:
            raise ValueError(f"{model.__tablename__} has no column {name!r}")
        return column

    def _filtered(self, model, filters: Optional[dict[str, Any]]):
        query = self.session.query(model)
        for name, value in (filters or {}).items():
            column = self._column(model, name)
            if isinstance(value, (list, tuple, set, frozenset)):
                query = query.filter(column.in_(list(value)))
            else:
                query = query.filter(column == value)
        return query

    def _abort(self) -> None:
        # Inside atomic() the outermost block owns the rollback.
        if not self._atomic_depth:
            self.session.rollback()

    def _write(self, collection: str) -> None:
        if self._atomic_depth:
            try:
                self.session.flush()
            except IntegrityError as exc:
                raise ConflictError(f"Conflicting {collection} record.") from exc
            except SQLAlchemyError as exc:
                raise GatewayError(f"Could not write {collection}.") from exc
        else:
            self._commit(collection)

    def _commit(self, label: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning("Integrity violation while writing %s: %s", label, exc.orig)
            raise ConflictError(f"Conflicting {label} record.") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise GatewayError(f"Could not write {label}.") from exc

    def _generate_room_code(self) -> str:
        for _ in range(ROOM_CODE_ATTEMPTS):
            code = "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if self.select_one("teams", {"room_code": code}) is None:
                return code
        raise GatewayError("Failed to generate room code.")
