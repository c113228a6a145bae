"""Domain exceptions and their HTTP mapping."""
from __future__ import annotations

from flask import Flask
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException


class SpendFlowError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(SpendFlowError):
    status_code = 400


class AuthenticationError(SpendFlowError):
    status_code = 401


class AuthorizationError(SpendFlowError):
    status_code = 403


class NotFoundError(SpendFlowError):
    status_code = 404


class ConflictError(SpendFlowError):
    """Raised when the store detects a concurrent modification."""

    status_code = 409


def register_error_handlers(app: Flask) -> None:
    from spendflow import db
    from spendflow.utils.helpers import json_response

    @app.errorhandler(SpendFlowError)
    def handle_domain_error(error: SpendFlowError):
        return json_response({"message": error.message}, status=error.status_code)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error: IntegrityError):
        db.session.rollback()
        app.logger.warning("Integrity error: %s", error.orig)
        return json_response({"message": "Unique constraint violation."}, status=409)

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return json_response({"message": error.description}, status=error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error while processing request")
        return json_response({"message": "Internal server error"}, status=500)
