"""Centralised error handling and custom exceptions.

The gateway and the service layer signal failures with the exceptions
below instead of HTTP status codes. The handlers registered by
``register_error_handlers`` serialise them into JSON responses so the
route handlers can stay thin.
"""
from __future__ import annotations

from flask import jsonify
from marshmallow import ValidationError as SchemaValidationError


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.fields = fields or {}

    @classmethod
    def from_schema_error(cls, err: SchemaValidationError) -> "ValidationError":
        messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return cls("Invalid request data.", fields=messages)

    def to_response(self, status_code: int = 400):
        response = {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": self.message,
                "fields": self.fields,
            }
        }
        return jsonify(response), status_code


class NotFoundError(Exception):
    """Raised when a requested resource cannot be found."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 404):
        response = {
            "error": {
                "code": "NOT_FOUND",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


class ConflictError(Exception):
    """Raised when a uniqueness or resource conflict occurs."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 409):
        response = {
            "error": {
                "code": "CONFLICT",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


class GatewayError(Exception):
    """Raised when the backing data store fails or is unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self, status_code: int = 503):
        response = {
            "error": {
                "code": "BACKEND_ERROR",
                "message": self.message,
            }
        }
        return jsonify(response), status_code


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return err.to_response(400)

    @app.errorhandler(SchemaValidationError)
    def handle_schema_validation_error(err: SchemaValidationError):
        return ValidationError.from_schema_error(err).to_response(400)

    @app.errorhandler(NotFoundError)
    def handle_not_found_error(err: NotFoundError):
        return err.to_response(404)

    @app.errorhandler(ConflictError)
    def handle_conflict_error(err: ConflictError):
        return err.to_response(409)

    @app.errorhandler(GatewayError)
    def handle_gateway_error(err: GatewayError):
        return err.to_response(503)
