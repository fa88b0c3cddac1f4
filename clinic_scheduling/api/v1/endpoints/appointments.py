"""Appointment endpoints."""

from datetime import date

from fastapi import APIRouter, Query, status

from clinic_scheduling.dependencies import AppointmentServiceDep
from clinic_scheduling.schemas.appointments import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdate,
    AvailableSlotsResponse,
)

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule appointment",
)
async def schedule_appointment(
    data: AppointmentCreate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Schedule a new appointment.

    Args:
        data: Appointment request
        service: Appointment service

    Returns:
        Created appointment
    """
    return await service.schedule_appointment(data)


@router.get(
    "/patients/{patient_id}",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List appointments of a patient",
)
async def list_patient_appointments(
    patient_id: int,
    service: AppointmentServiceDep,
) -> AppointmentListResponse:
    """Patient history, most recent first."""
    items = await service.list_by_patient(patient_id)
    return AppointmentListResponse(total=len(items), items=items)


@router.get(
    "/providers/{provider_id}",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List appointments of a provider",
)
async def list_provider_appointments(
    provider_id: int,
    service: AppointmentServiceDep,
) -> AppointmentListResponse:
    """Provider schedule in chronological order."""
    items = await service.list_by_provider(provider_id)
    return AppointmentListResponse(total=len(items), items=items)


@router.get(
    "/providers/{provider_id}/slots",
    response_model=AvailableSlotsResponse,
    status_code=status.HTTP_200_OK,
    summary="Available slots for a provider",
)
async def get_available_slots(
    provider_id: int,
    service: AppointmentServiceDep,
    appointment_date: date = Query(..., alias="date"),
) -> AvailableSlotsResponse:
    """
    Free start times on the scheduling grid.

    Args:
        provider_id: Provider ID
        service: Appointment service
        appointment_date: Day to inspect

    Returns:
        Unbooked slots in ascending order
    """
    slots = await service.get_available_slots(provider_id, appointment_date)
    return AvailableSlotsResponse(
        provider_id=provider_id,
        appointment_date=appointment_date,
        slot_minutes=service.grid.slot_minutes,
        slots=slots,
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: int,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Get a specific appointment by ID."""
    return await service.get_appointment(appointment_id)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: int,
    data: AppointmentUpdate,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Update an existing appointment.

    Args:
        appointment_id: Appointment ID
        data: Fields to change
        service: Appointment service

    Returns:
        Updated appointment
    """
    return await service.update_appointment(appointment_id, data)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: int,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """Cancel an appointment. Cancelled appointments cannot be changed again."""
    return await service.cancel_appointment(appointment_id)
