"""Appointment schemas for request/response validation.

Range and ordering rules (positive ids, future dates, duration bounds) are not
declared here: the scheduling validation gate applies them in a fixed order so
that callers always learn about the first offending field.
"""

from datetime import date, datetime, time
from enum import Enum

from pydantic import BaseModel, Field


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class AppointmentCreate(BaseModel):
    """Schema for scheduling a new appointment."""

    patient_id: int | None = None
    provider_id: int | None = None
    appointment_date: date | None = None
    appointment_time: time | None = None
    duration_minutes: int | None = 30
    reason: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class AppointmentUpdate(BaseModel):
    """Schema for updating an existing appointment. Unset fields keep their value."""

    patient_id: int | None = None
    provider_id: int | None = None
    appointment_date: date | None = None
    appointment_time: time | None = None
    duration_minutes: int | None = None
    reason: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: int
    patient_id: int
    provider_id: int
    appointment_date: date
    appointment_time: time
    duration_minutes: int
    status: AppointmentStatus
    reason: str
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""

    total: int
    items: list[AppointmentResponse]


class AvailableSlotsResponse(BaseModel):
    """Free grid start times for a provider's day."""

    provider_id: int
    appointment_date: date
    slot_minutes: int
    slots: list[time]
