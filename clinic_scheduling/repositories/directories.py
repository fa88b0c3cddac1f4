"""Patient and provider lookups used to check references."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduling.core.redis_client import CacheManager
from clinic_scheduling.models.patients import patients
from clinic_scheduling.models.providers import providers


class SqlPatientDirectory:
    """Patient existence checks against the patients table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, patient_id: int) -> bool:
        stmt = select(patients.c.id).where(patients.c.id == patient_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None


class SqlProviderDirectory:
    """Provider records by ID, cached in Redis when available."""

    PROVIDER_CACHE_TTL = 900  # 15 minutes

    def __init__(
        self,
        db: AsyncSession,
        cache_manager: CacheManager | None = None,
        ttl: int | None = None,
    ):
        """Initialize directory with database session and optional cache manager."""
        self.db = db
        self.cache = cache_manager
        self.ttl = ttl or self.PROVIDER_CACHE_TTL

    @staticmethod
    def _get_provider_cache_key(provider_id: int) -> str:
        """Generate cache key for provider."""
        return f"provider:{provider_id}"

    async def get(self, provider_id: int) -> dict[str, Any] | None:
        """Get provider by ID with caching."""
        if self.cache:
            cached = await self.cache.get_json(self._get_provider_cache_key(provider_id))
            if cached:
                return cached

        stmt = select(providers).where(providers.c.id == provider_id)
        result = await self.db.execute(stmt)
        provider = result.mappings().first()

        if not provider:
            return None

        provider_dict = dict(provider)

        if self.cache:
            await self.cache.set_json(
                self._get_provider_cache_key(provider_id), provider_dict, ttl=self.ttl
            )

        return provider_dict
