"""
Service-level errors.

Services raise these; `main.py` turns them into JSON responses. Routers never
build error bodies themselves.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base exception for service-level errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message}


class InvalidParameter(ServiceError):
    status_code = 400

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Invalid {field}")
        self.field = field

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, "field": self.field}


class ValidationFailed(ServiceError):
    status_code = 400

    def __init__(self, errors: list[dict[str, str]]) -> None:
        super().__init__("Validation failed")
        self.errors = errors

    def to_body(self) -> dict[str, Any]:
        return {"errors": self.errors}


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    status_code = 409


class Unauthorized(ServiceError):
    status_code = 401


class Forbidden(ServiceError):
    status_code = 403


class StoreError(ServiceError):
    """The database failed. `details` carries the driver's message."""

    status_code = 500

    def __init__(self, message: str = "Server error", details: str | None = None) -> None:
        super().__init__(message)
        self.details = details

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body
