"""Database setup utilities.

This module exposes the shared ``db`` object used by the models and by
the data gateway. The application factory initialises ``db`` with the
Flask app, so import it from ``mento`` rather than from here.
"""
from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
