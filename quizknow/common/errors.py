"""
Error taxonomy shared by the access and quiz services.

Services raise these exceptions; the application-level handler registered
in ``register_error_handlers`` turns them into the JSON error envelope.
"""
from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError


class QuizKnowError(Exception):
    """Base class for every error the core reports to its caller."""

    status_code = 500
    error_code = "error"

    def __init__(self, message: str = None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message, 'code': self.error_code}


class NotFound(QuizKnowError):
    """Resource not found"""
    status_code = 404
    error_code = "not_found"


class Forbidden(QuizKnowError):
    """You are not allowed to perform this action"""
    status_code = 403
    error_code = "forbidden"


class InvalidState(QuizKnowError):
    """Operation not valid in the current state"""
    status_code = 409
    error_code = "invalid_state"


class DuplicateRequest(QuizKnowError):
    """Request already sent"""
    status_code = 409
    error_code = "duplicate_request"


class InvalidTarget(QuizKnowError):
    """Invalid instructor ID"""
    status_code = 400
    error_code = "invalid_target"


class AttemptsExceeded(QuizKnowError):
    """Maximum attempts reached for this quiz"""
    status_code = 409
    error_code = "attempts_exceeded"


class ValidationError(QuizKnowError):
    """Invalid input"""
    status_code = 400
    error_code = "validation_error"


class StorageError(QuizKnowError):
    """Storage failure"""
    status_code = 500
    error_code = "storage_error"


def format_pydantic_errors(exc) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return "; ".join(parts)


def register_error_handlers(app: Flask) -> None:
    """Translate taxonomy errors and storage failures into JSON responses."""
    from quizknow import db

    @app.errorhandler(QuizKnowError)
    def handle_quizknow_error(exc: QuizKnowError):
        if exc.status_code >= 500:
            app.logger.error(f"{exc.error_code}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc: SQLAlchemyError):
        db.session.rollback()
        app.logger.exception(f"Unhandled storage error: {exc}")
        return jsonify(StorageError("Storage failure, no changes were saved").to_dict()), 500
