"""
Domain errors raised by services and translated to JSON responses in main.py
"""
from fastapi import status


class AppError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message)
        self.message = message
        self.error = error


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateTransition(AppError):
    status_code = status.HTTP_409_CONFLICT
