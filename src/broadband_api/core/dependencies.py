"""FastAPI dependency injection for database sessions and the resolver.

The result cache and geocoder are process-wide singletons, so every request
shares one cell cache.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.core.config import get_settings
from broadband_api.core.database import get_session_factory
from broadband_api.lib.availability import ResultCache
from broadband_api.lib.geocoder import CensusBlockGeocoder
from broadband_api.services.resolver_service import Resolver


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


@lru_cache
def get_result_cache() -> ResultCache:
    """Return the process-wide result cache."""
    settings = get_settings()
    return ResultCache(max_size=settings.result_cache_max_size, ttl_seconds=settings.result_cache_ttl_seconds)


@lru_cache
def get_geocoder() -> CensusBlockGeocoder:
    """Return the process-wide Census geocoder."""
    settings = get_settings()
    return CensusBlockGeocoder(base_url=settings.census_geocoder_base_url, timeout=settings.census_geocoder_timeout)


def get_resolver() -> Resolver:
    """Build a resolver over the shared cache and geocoder."""
    return Resolver(cache=get_result_cache(), geocoder=get_geocoder())
