from typing import Annotated

from fastapi import Depends

from restaurant_booking.core.db import DbSession
from restaurant_booking.repositories.storage import DbReservationStorage
from restaurant_booking.services.availability_service import (
    AvailabilityService,
)
from restaurant_booking.services.cache_service import (
    CacheService,
    cache_service,
)


async def get_cache_service() -> CacheService:
    """Зависимость для получения сервиса кеширования."""
    return cache_service


async def get_availability_service(
    session: DbSession,
) -> AvailabilityService:
    """Сервис доступности, читающий бронирования из текущей сессии."""
    return AvailabilityService(DbReservationStorage(session))


CacheServiceDep = Depends(get_cache_service)
Availability = Annotated[
    AvailabilityService,
    Depends(get_availability_service),
]
