"""Domain errors raised by the goal core and rendered by the API layer."""

from __future__ import annotations


class GoalsError(Exception):
    """Base class. ``code`` is machine-readable, ``status_code`` is the HTTP mapping."""

    code = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class ValidationError(GoalsError):
    code = "validation_error"
    status_code = 400


class NotFoundError(GoalsError):
    code = "not_found"
    status_code = 404


class InvalidStateError(GoalsError):
    code = "invalid_state"
    status_code = 409


class InsufficientFundsError(GoalsError):
    code = "insufficient_funds"
    status_code = 422


class PersistenceError(GoalsError):
    """Store unavailable or transaction aborted. Safe to retry."""

    code = "persistence_error"
    status_code = 503
