"""
Domain errors raised by services and engines.

Routers do not catch these individually; ``app.main`` registers one handler
that turns any ``AppError`` into ``{"success": false, "message": ...}`` with
the error's status code.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationFailed(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class InvalidTransition(AppError):
    """An attempt action that is not allowed in the current phase."""

    status_code = 409


class AlreadySubmitted(AppError):
    status_code = 409


class GateError(AppError):
    """Wrong passcode or mismatched identity. Always carries a field name."""

    status_code = 422

    def __init__(self, field: str, message: str):
        super().__init__(message, field=field)


class UploadError(AppError):
    status_code = 500


class SubmissionError(AppError):
    status_code = 500


class StorageError(AppError):
    status_code = 500


class MailError(AppError):
    status_code = 500


class ExtractionError(AppError):
    status_code = 500


class PersistenceError(AppError):
    """A database write was rejected."""

    status_code = 500
