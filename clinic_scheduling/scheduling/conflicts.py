"""Interval conflict detection for a provider's day.

Intervals are half-open, ``[start, start + duration)``, measured in seconds
since midnight of the appointment date. Two intervals that only touch at an
endpoint do not conflict.
"""

from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from typing import Protocol, TypeVar

from clinic_scheduling.schemas.appointments import AppointmentStatus

# Candidate length used when only a start time is probed
DEFAULT_PROBE_MINUTES = 30

# Statuses that occupy the provider's time
BLOCKING_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED})


class BookedInterval(Protocol):
    id: int
    status: AppointmentStatus | str
    appointment_time: time
    duration_minutes: int


BookedT = TypeVar("BookedT", bound=BookedInterval)


def offset_seconds(value: time) -> float:
    """Seconds elapsed since midnight, including the fractional part."""
    return value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1_000_000


def end_time(start: time, duration_minutes: int) -> time:
    """Wall-clock end of an interval (wraps past midnight)."""
    return (datetime.combine(date.min, start) + timedelta(minutes=duration_minutes)).time()


def intervals_overlap(start_a: float, end_a: float, start_b: float, end_b: float) -> bool:
    """Whether ``[start_a, end_a)`` and ``[start_b, end_b)`` share any instant."""
    return start_a < end_b and end_a > start_b


def blocks_time(status: AppointmentStatus | str) -> bool:
    return AppointmentStatus(status) in BLOCKING_STATUSES


def find_conflict(
    existing: Iterable[BookedT],
    candidate_time: time,
    candidate_duration: int | None = None,
    exclude_id: int | None = None,
    probe_minutes: int = DEFAULT_PROBE_MINUTES,
) -> BookedT | None:
    """
    Find the first booked appointment overlapping the candidate interval.

    Args:
        existing: Appointments for one provider on one date
        candidate_time: Requested start time
        candidate_duration: Requested length in minutes, defaults to ``probe_minutes``
        exclude_id: Appointment to ignore (the one being rescheduled)
        probe_minutes: Candidate length when no duration is given

    Returns:
        The overlapping appointment, or None when the interval is free
    """
    duration = probe_minutes if candidate_duration is None else candidate_duration
    candidate_start = offset_seconds(candidate_time)
    candidate_end = candidate_start + duration * 60

    for appointment in existing:
        if exclude_id is not None and appointment.id == exclude_id:
            continue
        if not blocks_time(appointment.status):
            continue
        start = offset_seconds(appointment.appointment_time)
        end = start + appointment.duration_minutes * 60
        if intervals_overlap(candidate_start, candidate_end, start, end):
            return appointment

    return None


def has_conflict(
    existing: Iterable[BookedInterval],
    candidate_time: time,
    candidate_duration: int | None = None,
    exclude_id: int | None = None,
    probe_minutes: int = DEFAULT_PROBE_MINUTES,
) -> bool:
    """Boolean form of :func:`find_conflict`."""
    conflict = find_conflict(
        existing, candidate_time, candidate_duration, exclude_id, probe_minutes
    )
    return conflict is not None
