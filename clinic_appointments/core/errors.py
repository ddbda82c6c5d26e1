"""
Domain error taxonomy.

Every error carries an HTTP status, a message and a list of field-keyed
entries. The handlers registered in ``main`` render them with the error
envelope from ``core.responses``.
"""
from enum import Enum
from typing import Any, Iterable, List, Optional

from fastapi import status
from pydantic import BaseModel


class ErrorCode(str, Enum):
    INVALID_FIELD = "E001"
    DUPLICATE = "E002"
    NOT_FUTURE_DATE = "E003"
    NOT_FOUND = "E004"
    INVALID_STATUS = "E005"
    INVALID_CREDENTIALS = "E006"
    NOT_ELIGIBLE = "E007"
    INVALID_TRANSITION = "E008"
    UNKNOWN = "E999"


class ErrorDetail(BaseModel):
    code: ErrorCode
    field: str
    message: Optional[str] = None

    def as_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class AppError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "An error occurred"

    def __init__(self, message: Optional[str] = None, errors: Optional[Iterable[ErrorDetail]] = None):
        self.message = message or self.message
        self.errors: List[ErrorDetail] = list(errors or [])
        super().__init__(self.message)

    def error_list(self) -> List[dict]:
        return [error.as_dict() for error in self.errors]


class ValidationError(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Validation error"


class DuplicateError(ValidationError):
    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(
            message or f"The {field} has already been taken",
            [ErrorDetail(code=ErrorCode.DUPLICATE, field=field)],
        )


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class EligibilityError(AppError):
    """The doctor cannot be booked at the requested clinic."""

    status_code = status.HTTP_400_BAD_REQUEST

    DOCTOR_NOT_FOUND = "doctor_not_found"
    CLINIC_NOT_FOUND = "clinic_not_found"
    DOCTOR_NOT_AT_CLINIC = "doctor_not_at_clinic"

    _messages = {
        DOCTOR_NOT_FOUND: "Doctor not found",
        CLINIC_NOT_FOUND: "Clinic not found",
        DOCTOR_NOT_AT_CLINIC: "Doctor does not work at this clinic",
    }
    _fields = {
        DOCTOR_NOT_FOUND: "doctor_id",
        CLINIC_NOT_FOUND: "clinic_id",
        DOCTOR_NOT_AT_CLINIC: "doctor_id",
    }

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(
            self._messages[reason],
            [ErrorDetail(code=ErrorCode.NOT_ELIGIBLE, field=self._fields[reason])],
        )


class InvalidTransitionError(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change status from {current} to {requested}",
            [ErrorDetail(code=ErrorCode.INVALID_TRANSITION, field="status")],
        )


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"


class ErrorCollector:
    """Accumulates field errors so a request reports every violation at once."""

    def __init__(self):
        self.errors: List[ErrorDetail] = []

    def add(self, code: ErrorCode, field: str, message: Optional[str] = None):
        self.errors.append(ErrorDetail(code=code, field=field, message=message))

    def __bool__(self):
        return bool(self.errors)

    def raise_if_any(self, message: str = "Validation error"):
        if self.errors:
            raise ValidationError(message, self.errors)
