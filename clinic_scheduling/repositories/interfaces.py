"""Collaborators the scheduling service depends on."""

from collections.abc import Collection
from datetime import date, time
from typing import Any, Protocol

from clinic_scheduling.schemas.appointments import AppointmentResponse, AppointmentStatus


class AppointmentStore(Protocol):
    """Durable storage and queries for appointment records."""

    async def find_by_id(self, appointment_id: int) -> AppointmentResponse | None: ...

    async def find_by_provider(self, provider_id: int) -> list[AppointmentResponse]: ...

    async def find_by_patient(self, patient_id: int) -> list[AppointmentResponse]: ...

    async def find_by_provider_and_date(
        self,
        provider_id: int,
        appointment_date: date,
    ) -> list[AppointmentResponse]: ...

    async def create(self, values: dict[str, Any]) -> AppointmentResponse: ...

    async def update(
        self,
        appointment_id: int,
        values: dict[str, Any],
        from_statuses: Collection[AppointmentStatus] | None = None,
    ) -> AppointmentResponse | None: ...

    async def exists_conflict(
        self,
        provider_id: int,
        appointment_date: date,
        appointment_time: time,
        duration_minutes: int | None = None,
        exclude_id: int | None = None,
    ) -> bool: ...

    async def delete(self, appointment_id: int) -> bool: ...


class PatientDirectory(Protocol):
    async def exists(self, patient_id: int) -> bool: ...


class ProviderDirectory(Protocol):
    async def get(self, provider_id: int) -> dict[str, Any] | None: ...
