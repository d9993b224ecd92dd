"""Application error taxonomy. Every failure leaves the API as {"error": message}."""
from __future__ import annotations


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed required fields."""

    status_code = 400


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """Duplicate unique field, or a delete blocked by references."""

    status_code = 400

    def __init__(self, message: str, count: int | None = None):
        super().__init__(message)
        self.count = count


class InternalError(AppError):
    status_code = 500
