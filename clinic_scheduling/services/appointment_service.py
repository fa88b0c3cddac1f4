"""Appointment scheduling service."""

from datetime import date, time
from typing import Any, NoReturn

import structlog

from clinic_scheduling.core.clock import Clock
from clinic_scheduling.core.exceptions import (
    ConflictException,
    NotFoundException,
    StateException,
    ValidationException,
)
from clinic_scheduling.core.locks import KeyedLock, schedule_key
from clinic_scheduling.repositories.interfaces import (
    AppointmentStore,
    PatientDirectory,
    ProviderDirectory,
)
from clinic_scheduling.scheduling import lifecycle
from clinic_scheduling.scheduling.conflicts import DEFAULT_PROBE_MINUTES, end_time, find_conflict
from clinic_scheduling.scheduling.lifecycle import LifecycleOperation
from clinic_scheduling.scheduling.slots import SlotGrid, available_slots
from clinic_scheduling.scheduling.validation import MAX_DURATION_MINUTES, validate_appointment
from clinic_scheduling.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentUpdate,
)

logger = structlog.get_logger()

# Fields that make up an appointment request
REQUEST_FIELDS = frozenset(AppointmentCreate.model_fields)


def _require_positive(value: int, field: str, label: str) -> None:
    if value <= 0:
        raise ValidationException(field, f"{label} must be greater than zero")


class AppointmentService:
    """Schedules, reschedules and cancels appointments for single providers."""

    def __init__(
        self,
        repository: AppointmentStore,
        patients: PatientDirectory,
        providers: ProviderDirectory,
        locks: KeyedLock,
        clock: Clock,
        grid: SlotGrid | None = None,
        max_duration_minutes: int = MAX_DURATION_MINUTES,
        probe_minutes: int = DEFAULT_PROBE_MINUTES,
    ):
        """Initialize service with its collaborators."""
        self.repository = repository
        self.patients = patients
        self.providers = providers
        self.locks = locks
        self.clock = clock
        self.grid = grid or SlotGrid()
        self.max_duration_minutes = max_duration_minutes
        self.probe_minutes = probe_minutes

    async def _ensure_patient_exists(self, patient_id: int) -> None:
        if not await self.patients.exists(patient_id):
            raise NotFoundException(
                f"Patient with ID {patient_id} does not exist",
                resource="patient",
                resource_id=patient_id,
            )

    async def _ensure_provider_exists(self, provider_id: int) -> None:
        if await self.providers.get(provider_id) is None:
            raise NotFoundException(
                f"Provider with ID {provider_id} does not exist",
                resource="provider",
                resource_id=provider_id,
            )

    async def _get_existing(self, appointment_id: int) -> AppointmentResponse:
        _require_positive(appointment_id, "id", "Appointment ID")
        appointment = await self.repository.find_by_id(appointment_id)
        if appointment is None:
            raise NotFoundException(
                f"Appointment with ID {appointment_id} does not exist",
                resource="appointment",
                resource_id=appointment_id,
            )
        return appointment

    async def _ensure_no_conflict(
        self,
        provider_id: int,
        appointment_date: date,
        appointment_time: time,
        duration_minutes: int,
        exclude_id: int | None = None,
    ) -> None:
        existing = await self.repository.find_by_provider_and_date(provider_id, appointment_date)
        conflict = find_conflict(existing, appointment_time, duration_minutes, exclude_id)
        if conflict is None:
            return

        logger.info(
            "appointment_conflict",
            provider_id=provider_id,
            date=appointment_date.isoformat(),
            time=appointment_time.isoformat(),
            conflicting_id=conflict.id,
        )
        raise ConflictException(
            provider_id,
            appointment_date,
            appointment_time,
            conflicting_id=conflict.id,
            interval=(
                conflict.appointment_time,
                end_time(conflict.appointment_time, conflict.duration_minutes),
            ),
        )

    async def _raise_lost_race(
        self, appointment_id: int, operation: LifecycleOperation
    ) -> NoReturn:
        """The guarded write matched nothing: report what the record turned into."""
        current = await self._get_existing(appointment_id)
        lifecycle.authorize(current.status, operation)
        raise StateException(
            current.status.value,
            operation.value,
            "Appointment was modified concurrently, retry the request",
        )

    async def schedule_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        """
        Schedule a new appointment.

        Args:
            data: Appointment request

        Returns:
            Stored appointment with its assigned ID

        Raises:
            ValidationException: If a field is missing or out of range
            NotFoundException: If the patient or provider does not exist
            ConflictException: If the provider is already booked in that interval
        """
        validate_appointment(data, self.clock.today(), self.max_duration_minutes)
        await self._ensure_patient_exists(data.patient_id)
        await self._ensure_provider_exists(data.provider_id)

        async with self.locks.acquire(schedule_key(data.provider_id, data.appointment_date)):
            await self._ensure_no_conflict(
                data.provider_id,
                data.appointment_date,
                data.appointment_time,
                data.duration_minutes,
            )
            values: dict[str, Any] = {
                **data.model_dump(include=REQUEST_FIELDS),
                "status": AppointmentStatus.SCHEDULED.value,
                "created_at": self.clock.now(),
                "updated_at": None,
            }
            appointment = await self.repository.create(values)

        logger.info(
            "appointment_scheduled",
            appointment_id=appointment.id,
            provider_id=appointment.provider_id,
            patient_id=appointment.patient_id,
            date=appointment.appointment_date.isoformat(),
            time=appointment.appointment_time.isoformat(),
        )
        return appointment

    async def get_appointment(self, appointment_id: int) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            ValidationException: If the ID is not positive
            NotFoundException: If appointment not found
        """
        return await self._get_existing(appointment_id)

    async def update_appointment(
        self,
        appointment_id: int,
        data: AppointmentUpdate,
    ) -> AppointmentResponse:
        """
        Change the fields of an existing appointment.

        Fields left unset in ``data`` keep their stored value. The merged
        record is validated and re-checked for conflicts as a whole.

        Args:
            appointment_id: Appointment ID
            data: Fields to change

        Returns:
            Updated appointment

        Raises:
            ValidationException: If the ID or a merged field is invalid
            NotFoundException: If the appointment (or a newly referenced patient/provider) is missing
            StateException: If the appointment is cancelled
            ConflictException: If the new interval overlaps another booking
        """
        existing = await self._get_existing(appointment_id)
        lifecycle.ensure_can_update(existing.status)

        changes = data.model_dump(exclude_unset=True)
        candidate = AppointmentCreate.model_validate(
            {**existing.model_dump(include=REQUEST_FIELDS), **changes}
        )
        validate_appointment(candidate, self.clock.today(), self.max_duration_minutes)

        if candidate.patient_id != existing.patient_id:
            await self._ensure_patient_exists(candidate.patient_id)
        if candidate.provider_id != existing.provider_id:
            await self._ensure_provider_exists(candidate.provider_id)

        async with self.locks.acquire(
            schedule_key(candidate.provider_id, candidate.appointment_date)
        ):
            await self._ensure_no_conflict(
                candidate.provider_id,
                candidate.appointment_date,
                candidate.appointment_time,
                candidate.duration_minutes,
                exclude_id=appointment_id,
            )
            values = {
                **candidate.model_dump(include=REQUEST_FIELDS),
                "updated_at": self.clock.now(),
            }
            updated = await self.repository.update(
                appointment_id,
                values,
                from_statuses=lifecycle.allowed_from(LifecycleOperation.UPDATE),
            )

        if updated is None:
            await self._raise_lost_race(appointment_id, LifecycleOperation.UPDATE)

        logger.info(
            "appointment_updated",
            appointment_id=appointment_id,
            changed=sorted(changes),
            status=updated.status.value,
        )
        return updated

    async def cancel_appointment(self, appointment_id: int) -> AppointmentResponse:
        """
        Cancel an appointment.

        Args:
            appointment_id: Appointment ID

        Returns:
            Cancelled appointment

        Raises:
            ValidationException: If the ID is not positive
            NotFoundException: If appointment not found
            StateException: If already cancelled or completed
        """
        existing = await self._get_existing(appointment_id)
        new_status = lifecycle.cancel(existing.status)

        updated = await self.repository.update(
            appointment_id,
            {"status": new_status.value, "updated_at": self.clock.now()},
            from_statuses={existing.status},
        )
        if updated is None:
            await self._raise_lost_race(appointment_id, LifecycleOperation.CANCEL)

        logger.info(
            "appointment_cancelled",
            appointment_id=appointment_id,
            previous_status=existing.status.value,
        )
        return updated

    async def get_available_slots(self, provider_id: int, appointment_date: date) -> list[time]:
        """
        Free grid start times for a provider on a date.

        Args:
            provider_id: Provider ID
            appointment_date: Date to check availability

        Returns:
            Unbooked start times in ascending order

        Raises:
            ValidationException: If provider ID is not positive or date is in the past
        """
        _require_positive(provider_id, "provider_id", "Provider ID")
        if appointment_date < self.clock.today():
            raise ValidationException(
                "appointment_date", "Cannot get available slots for past dates"
            )

        existing = await self.repository.find_by_provider_and_date(provider_id, appointment_date)
        return available_slots(existing, self.grid)

    async def has_conflict(
        self,
        provider_id: int,
        appointment_date: date,
        appointment_time: time,
        duration_minutes: int | None = None,
        exclude_id: int | None = None,
    ) -> bool:
        """Whether the interval overlaps a booked appointment.

        Without a duration the candidate lasts ``probe_minutes``.
        """
        if duration_minutes is None:
            duration_minutes = self.probe_minutes
        return await self.repository.exists_conflict(
            provider_id, appointment_date, appointment_time, duration_minutes, exclude_id
        )

    async def list_by_patient(self, patient_id: int) -> list[AppointmentResponse]:
        """Patient appointment history, most recent first."""
        _require_positive(patient_id, "patient_id", "Patient ID")
        return await self.repository.find_by_patient(patient_id)

    async def list_by_provider(self, provider_id: int) -> list[AppointmentResponse]:
        """Provider schedule in chronological order."""
        _require_positive(provider_id, "provider_id", "Provider ID")
        return await self.repository.find_by_provider(provider_id)
