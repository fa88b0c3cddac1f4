"""Validation gate for appointment requests."""

from datetime import date, time
from typing import Protocol

from clinic_scheduling.core.exceptions import ValidationException

MAX_DURATION_MINUTES = 480


class AppointmentFields(Protocol):
    """Fields the gate inspects; satisfied by ``AppointmentCreate``."""

    patient_id: int | None
    provider_id: int | None
    appointment_date: date | None
    appointment_time: time | None
    duration_minutes: int | None
    reason: str | None


def validate_appointment(
    candidate: AppointmentFields,
    today: date,
    max_duration_minutes: int = MAX_DURATION_MINUTES,
) -> None:
    """
    Check an appointment candidate, stopping at the first violated field.

    Fields are checked in a fixed order: patient, provider, date, time,
    duration, reason.

    Args:
        candidate: Appointment fields to check
        today: Current date in the clinic's timezone
        max_duration_minutes: Upper bound for the duration (inclusive)

    Raises:
        ValidationException: Naming the first invalid field
    """
    if candidate.patient_id is None or candidate.patient_id <= 0:
        raise ValidationException("patient_id", "Patient ID must be greater than zero")

    if candidate.provider_id is None or candidate.provider_id <= 0:
        raise ValidationException("provider_id", "Provider ID must be greater than zero")

    if candidate.appointment_date is None:
        raise ValidationException("appointment_date", "Appointment date is required")

    if candidate.appointment_date < today:
        raise ValidationException(
            "appointment_date", "Cannot schedule appointments in the past"
        )

    # datetime.time already bounds the value to [00:00, 24:00)
    if candidate.appointment_time is None or not isinstance(candidate.appointment_time, time):
        raise ValidationException("appointment_time", "Invalid appointment time")

    # Times are wall-clock in the clinic timezone, like the slot grid
    if candidate.appointment_time.tzinfo is not None:
        raise ValidationException(
            "appointment_time", "Appointment time must not carry a UTC offset"
        )

    duration = candidate.duration_minutes
    if duration is None or duration <= 0 or duration > max_duration_minutes:
        raise ValidationException(
            "duration_minutes",
            f"Appointment duration must be between 1 and {max_duration_minutes} minutes",
        )

    if candidate.reason is None or not candidate.reason.strip():
        raise ValidationException("reason", "Appointment reason is required")
