"""SQLAlchemy Core persistence for appointments."""

from collections.abc import Collection
from datetime import date, time
from typing import Any

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.models.appointments import appointments
from clinic_scheduling.scheduling.conflicts import BLOCKING_STATUSES, has_conflict
from clinic_scheduling.schemas.appointments import AppointmentResponse, AppointmentStatus


class AppointmentRepository:
    """Appointment storage backed by an async database session."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    @staticmethod
    def _to_response(row: Any) -> AppointmentResponse:
        return AppointmentResponse.model_validate(dict(row))

    async def find_by_id(self, appointment_id: int) -> AppointmentResponse | None:
        """Get appointment by ID, or None if it does not exist."""
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        return self._to_response(row) if row else None

    async def find_by_provider(self, provider_id: int) -> list[AppointmentResponse]:
        """Provider schedule in chronological order."""
        stmt = (
            select(appointments)
            .where(appointments.c.provider_id == provider_id)
            .order_by(appointments.c.appointment_date, appointments.c.appointment_time)
        )
        result = await self.db.execute(stmt)
        return [self._to_response(row) for row in result.mappings().all()]

    async def find_by_patient(self, patient_id: int) -> list[AppointmentResponse]:
        """Patient history, most recent first."""
        stmt = (
            select(appointments)
            .where(appointments.c.patient_id == patient_id)
            .order_by(
                appointments.c.appointment_date.desc(),
                appointments.c.appointment_time.desc(),
            )
        )
        result = await self.db.execute(stmt)
        return [self._to_response(row) for row in result.mappings().all()]

    async def find_by_provider_and_date(
        self,
        provider_id: int,
        appointment_date: date,
        statuses: Collection[AppointmentStatus] | None = None,
    ) -> list[AppointmentResponse]:
        """
        Appointments of one provider on one date, ordered by start time.

        Args:
            provider_id: Provider ID
            appointment_date: Calendar date
            statuses: Restrict to these statuses when given

        Returns:
            Matching appointments
        """
        conditions = [
            appointments.c.provider_id == provider_id,
            appointments.c.appointment_date == appointment_date,
        ]
        if statuses is not None:
            conditions.append(appointments.c.status.in_([s.value for s in statuses]))

        stmt = select(appointments).where(and_(*conditions)).order_by(appointments.c.appointment_time)
        result = await self.db.execute(stmt)
        return [self._to_response(row) for row in result.mappings().all()]

    async def create(self, values: dict[str, Any]) -> AppointmentResponse:
        """Insert an appointment and return the stored record with its ID."""
        stmt = insert(appointments).values(**values).returning(appointments)
        result = await self.db.execute(stmt)
        row = result.mappings().one()
        await self.db.commit()
        return self._to_response(row)

    async def update(
        self,
        appointment_id: int,
        values: dict[str, Any],
        from_statuses: Collection[AppointmentStatus] | None = None,
    ) -> AppointmentResponse | None:
        """
        Write new values for an appointment.

        Args:
            appointment_id: Appointment ID
            values: Columns to set
            from_statuses: Only write if the stored status is still one of these

        Returns:
            Updated appointment, or None if no row matched
        """
        conditions = [appointments.c.id == appointment_id]
        if from_statuses is not None:
            conditions.append(appointments.c.status.in_([s.value for s in from_statuses]))

        stmt = update(appointments).where(and_(*conditions)).values(**values).returning(appointments)
        result = await self.db.execute(stmt)
        row = result.mappings().first()
        await self.db.commit()
        return self._to_response(row) if row else None

    async def exists_conflict(
        self,
        provider_id: int,
        appointment_date: date,
        appointment_time: time,
        duration_minutes: int | None = None,
        exclude_id: int | None = None,
    ) -> bool:
        """Whether the interval overlaps a booked appointment of the provider that day."""
        booked = await self.find_by_provider_and_date(
            provider_id, appointment_date, statuses=BLOCKING_STATUSES
        )
        return has_conflict(booked, appointment_time, duration_minutes, exclude_id)

    async def delete(self, appointment_id: int) -> bool:
        """Permanently remove a record. Bypasses all scheduling rules."""
        stmt = delete(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        await self.db.commit()
        return bool(result.rowcount)
