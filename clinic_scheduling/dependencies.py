"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.config import settings
from clinic_scheduling.core.clock import Clock, SystemClock
from clinic_scheduling.core.locks import KeyedLock, build_keyed_lock
from clinic_scheduling.core.redis_client import CacheManager, get_redis_client
from clinic_scheduling.database import get_db
from clinic_scheduling.repositories.appointment_repository import AppointmentRepository
from clinic_scheduling.repositories.directories import SqlPatientDirectory, SqlProviderDirectory
from clinic_scheduling.scheduling.slots import SlotGrid
from clinic_scheduling.services.appointment_service import AppointmentService


@lru_cache
def get_keyed_lock() -> KeyedLock:
    """Process-wide scheduling lock backend."""
    return build_keyed_lock(settings, get_redis_client())


def get_clock() -> Clock:
    """Wall clock in the clinic's timezone."""
    return SystemClock(settings.clinic_timezone)


def get_cache_manager() -> CacheManager | None:
    """Redis cache, or None when Redis is not configured."""
    client = get_redis_client()
    return CacheManager(client) if client is not None else None


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
SchedulingLock = Annotated[KeyedLock, Depends(get_keyed_lock)]
CurrentClock = Annotated[Clock, Depends(get_clock)]
Cache = Annotated[CacheManager | None, Depends(get_cache_manager)]


async def get_appointment_service(
    db: DatabaseSession,
    locks: SchedulingLock,
    clock: CurrentClock,
    cache: Cache,
) -> AppointmentService:
    """
    Build the scheduling service for one request.

    Args:
        db: Database session
        locks: Scheduling lock backend
        clock: Time source
        cache: Optional provider cache

    Returns:
        Appointment service bound to the request's session
    """
    return AppointmentService(
        repository=AppointmentRepository(db),
        patients=SqlPatientDirectory(db),
        providers=SqlProviderDirectory(db, cache, ttl=settings.provider_cache_ttl),
        locks=locks,
        clock=clock,
        grid=SlotGrid.from_settings(settings),
        max_duration_minutes=settings.max_duration_minutes,
        probe_minutes=settings.probe_duration_minutes,
    )


AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
