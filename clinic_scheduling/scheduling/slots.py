"""Fixed-grid slot enumeration."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import time

from clinic_scheduling.config import Settings
from clinic_scheduling.scheduling.conflicts import BookedInterval
from clinic_scheduling.schemas.appointments import AppointmentStatus


@dataclass(frozen=True)
class SlotGrid:
    """Candidate start times: every ``slot_minutes`` from ``start_hour`` up to ``end_hour``."""

    start_hour: int = 9
    end_hour: int = 17
    slot_minutes: int = 30

    def __post_init__(self) -> None:
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValueError(f"Invalid grid hours {self.start_hour}-{self.end_hour}")
        if self.slot_minutes <= 0 or 60 % self.slot_minutes:
            raise ValueError(f"Slot size {self.slot_minutes} must divide an hour")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlotGrid":
        return cls(
            start_hour=settings.schedule_start_hour,
            end_hour=settings.schedule_end_hour,
            slot_minutes=settings.slot_minutes,
        )

    def __len__(self) -> int:
        return (self.end_hour - self.start_hour) * (60 // self.slot_minutes)

    def times(self) -> Iterator[time]:
        for hour in range(self.start_hour, self.end_hour):
            for minute in range(0, 60, self.slot_minutes):
                yield time(hour, minute)


def booked_start_times(existing: Iterable[BookedInterval]) -> set[time]:
    """Start times held by appointments that are not cancelled (no-shows still hold theirs)."""
    return {
        appointment.appointment_time
        for appointment in existing
        if AppointmentStatus(appointment.status) != AppointmentStatus.CANCELLED
    }


def available_slots(existing: Iterable[BookedInterval], grid: SlotGrid | None = None) -> list[time]:
    """
    Grid start times not taken by an existing appointment's exact start.

    Args:
        existing: Appointments for one provider on one date
        grid: Slot grid, defaults to 09:00-17:00 every 30 minutes

    Returns:
        Free start times in ascending order
    """
    grid = grid or SlotGrid()
    booked = booked_start_times(existing)
    return [slot for slot in grid.times() if slot not in booked]
