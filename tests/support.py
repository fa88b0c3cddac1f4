"""In-memory collaborators and shared constants for scheduling tests."""

import asyncio
from collections.abc import Collection
from datetime import UTC, date, datetime, time
from typing import Any

from clinic_scheduling.scheduling.conflicts import BLOCKING_STATUSES, has_conflict
from clinic_scheduling.schemas.appointments import AppointmentResponse, AppointmentStatus

# Scenario day used across tests; the clock sits a week before it
SCENARIO_DATE = date(2025, 6, 10)
NOW = datetime(2025, 6, 3, 8, 0, tzinfo=UTC)

PATIENT_ID = 1
OTHER_PATIENT_ID = 2
PROVIDER_ID = 1
OTHER_PROVIDER_ID = 2


class InMemoryAppointmentStore:
    """Dict-backed appointment store.

    Every call yields to the event loop first so concurrent requests interleave
    at the same points a database round-trip would.
    """

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    async def _io(self) -> None:
        await asyncio.sleep(0)

    def _response(self, row: dict[str, Any]) -> AppointmentResponse:
        return AppointmentResponse.model_validate(row)

    async def find_by_id(self, appointment_id: int) -> AppointmentResponse | None:
        await self._io()
        row = self.rows.get(appointment_id)
        return self._response(row) if row else None

    async def find_by_provider(self, provider_id: int) -> list[AppointmentResponse]:
        await self._io()
        rows = [r for r in self.rows.values() if r["provider_id"] == provider_id]
        rows.sort(key=lambda r: (r["appointment_date"], r["appointment_time"]))
        return [self._response(r) for r in rows]

    async def find_by_patient(self, patient_id: int) -> list[AppointmentResponse]:
        await self._io()
        rows = [r for r in self.rows.values() if r["patient_id"] == patient_id]
        rows.sort(key=lambda r: (r["appointment_date"], r["appointment_time"]), reverse=True)
        return [self._response(r) for r in rows]

    async def find_by_provider_and_date(
        self,
        provider_id: int,
        appointment_date: date,
        statuses: Collection[AppointmentStatus] | None = None,
    ) -> list[AppointmentResponse]:
        await self._io()
        rows = [
            r
            for r in self.rows.values()
            if r["provider_id"] == provider_id
            and r["appointment_date"] == appointment_date
            and (statuses is None or AppointmentStatus(r["status"]) in statuses)
        ]
        rows.sort(key=lambda r: r["appointment_time"])
        return [self._response(r) for r in rows]

    async def create(self, values: dict[str, Any]) -> AppointmentResponse:
        await self._io()
        row = {**values, "id": self._next_id}
        self.rows[row["id"]] = row
        self._next_id += 1
        return self._response(row)

    async def update(
        self,
        appointment_id: int,
        values: dict[str, Any],
        from_statuses: Collection[AppointmentStatus] | None = None,
    ) -> AppointmentResponse | None:
        await self._io()
        row = self.rows.get(appointment_id)
        if row is None:
            return None
        if from_statuses is not None and AppointmentStatus(row["status"]) not in from_statuses:
            return None
        row.update(values)
        return self._response(row)

    async def exists_conflict(
        self,
        provider_id: int,
        appointment_date: date,
        appointment_time: time,
        duration_minutes: int | None = None,
        exclude_id: int | None = None,
    ) -> bool:
        booked = await self.find_by_provider_and_date(
            provider_id, appointment_date, statuses=BLOCKING_STATUSES
        )
        return has_conflict(booked, appointment_time, duration_minutes, exclude_id)

    async def delete(self, appointment_id: int) -> bool:
        await self._io()
        return self.rows.pop(appointment_id, None) is not None

    def set_status(self, appointment_id: int, status: AppointmentStatus) -> None:
        """Stand-in for workflows outside scheduling (visit completion, no-shows)."""
        self.rows[appointment_id]["status"] = status.value


class StaticPatientDirectory:
    def __init__(self, ids: set[int]) -> None:
        self.ids = ids

    async def exists(self, patient_id: int) -> bool:
        await asyncio.sleep(0)
        return patient_id in self.ids


class StaticProviderDirectory:
    def __init__(self, records: dict[int, dict[str, Any]]) -> None:
        self.records = records

    async def get(self, provider_id: int) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        return self.records.get(provider_id)
