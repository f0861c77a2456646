"""
Domain errors raised by the service layer.

Routes never build HTTP errors for business failures themselves; the
handlers registered in ``main.py`` map each class to its status code and
the ``{message, status, data}`` envelope.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def payload(self) -> dict | None:
        return None


class ValidationError(AppError):
    """One or more ``{field, message}`` violations; nothing was written."""

    status_code = 400

    def __init__(self, errors: list[FieldError], message: str = "Validation error"):
        super().__init__(message)
        self.errors = list(errors)

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)], message=message)

    def payload(self) -> dict:
        return {"errors": [e.as_dict() for e in self.errors]}


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403


class ConflictError(AppError):
    status_code = 409

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def payload(self) -> dict | None:
        if self.field is None:
            return None
        return {"errors": [FieldError(self.field, self.message).as_dict()]}


def merge_field_errors(*groups: list[FieldError]) -> list[FieldError]:
    """Concatenate error lists keeping the first message reported per field."""
    seen: set[str] = set()
    merged: list[FieldError] = []
    for group in groups:
        for err in group:
            if err.field in seen:
                continue
            seen.add(err.field)
            merged.append(err)
    return merged
