"""Custom application exceptions."""

from datetime import date, time
from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def details(self) -> dict[str, Any]:
        """Structured context for the error response."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize the exception for an error response body."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(AppException):
    """A request field is missing or out of range."""

    def __init__(self, field: str, message: str = "Validation error"):
        """Initialize with the offending field and 422 status code."""
        self.field = field
        super().__init__(message, status_code=422)

    @property
    def details(self) -> dict[str, Any]:
        return {"field": self.field}


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(
        self,
        message: str = "Resource not found",
        resource: str | None = None,
        resource_id: int | None = None,
    ):
        """Initialize with 404 status code."""
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message, status_code=404)

    @property
    def details(self) -> dict[str, Any]:
        return {"resource": self.resource, "resource_id": self.resource_id}


class ConflictException(AppException):
    """The requested interval overlaps a booked appointment."""

    def __init__(
        self,
        provider_id: int,
        appointment_date: date,
        appointment_time: time,
        conflicting_id: int | None = None,
        interval: tuple[time, time] | None = None,
    ):
        """Initialize with the offending provider, date and interval."""
        self.provider_id = provider_id
        self.appointment_date = appointment_date
        self.appointment_time = appointment_time
        self.conflicting_id = conflicting_id
        self.interval = interval
        message = (
            f"Provider {provider_id} already has an appointment at "
            f"{appointment_date.isoformat()} {appointment_time.strftime('%H:%M')}"
        )
        super().__init__(message, status_code=409)

    @property
    def details(self) -> dict[str, Any]:
        details: dict[str, Any] = {
            "provider_id": self.provider_id,
            "date": self.appointment_date.isoformat(),
            "time": self.appointment_time.isoformat(),
            "conflicting_appointment_id": self.conflicting_id,
        }
        if self.interval:
            start, end = self.interval
            details["interval"] = {"start": start.isoformat(), "end": end.isoformat()}
        return details


class StateException(AppException):
    """The operation is not allowed for the appointment's current status."""

    def __init__(self, current_status: str, operation: str, message: str | None = None):
        """Initialize with the current status, attempted operation and 409 status code."""
        self.current_status = current_status
        self.operation = operation
        super().__init__(
            message or f"Cannot {operation} an appointment with status '{current_status}'",
            status_code=409,
        )

    @property
    def details(self) -> dict[str, Any]:
        return {"current_status": self.current_status, "operation": self.operation}


class LockTimeoutException(AppException):
    """A scheduling lock could not be acquired in time."""

    def __init__(self, key: str):
        """Initialize with 503 status code."""
        self.key = key
        super().__init__("Schedule is busy, try again shortly", status_code=503)

    @property
    def details(self) -> dict[str, Any]:
        return {"key": self.key}
