"""Typed, recoverable failures raised by the learning core."""
from __future__ import annotations


class PlatformError(Exception):
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PlatformError):
    status_code = 422


class ConflictError(PlatformError):
    status_code = 409


class NotFoundError(PlatformError):
    status_code = 404


__all__ = ["PlatformError", "ValidationError", "ConflictError", "NotFoundError"]
