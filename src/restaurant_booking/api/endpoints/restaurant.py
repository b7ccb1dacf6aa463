from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from restaurant_booking.core.config import settings
from restaurant_booking.core.constants import (
    MAX_DURATION_HOURS,
    MAX_PARTY_SIZE,
    MIN_DURATION_HOURS,
    MIN_PARTY_SIZE,
)
from restaurant_booking.core.db import DbSession
from restaurant_booking.core.dependencies import Availability, CacheServiceDep
from restaurant_booking.repositories.reservation import reservation_repository
from restaurant_booking.repositories.restaurant import restaurant_repository
from restaurant_booking.schemas.availability import AvailableSlotsResponse
from restaurant_booking.schemas.common import ErrorResponse
from restaurant_booking.schemas.reservation import (
    DayReservations,
    ReservationInfo,
)
from restaurant_booking.schemas.restaurant import (
    RestaurantCreate,
    RestaurantInfo,
    RestaurantShortInfo,
)
from restaurant_booking.services.cache_service import CacheService
from restaurant_booking.utils.exceptions import BookingError
from restaurant_booking.utils.http import build_booking_error, build_error
from restaurant_booking.utils.logging_decorator import event_logger

router = APIRouter(prefix='/restaurants', tags=['Рестораны'])

PartySizeQuery = Annotated[
    int,
    Query(
        alias='party_size',
        ge=MIN_PARTY_SIZE,
        le=MAX_PARTY_SIZE,
        description='Количество гостей',
    ),
]
DurationQuery = Annotated[
    float,
    Query(
        alias='duration',
        ge=MIN_DURATION_HOURS,
        le=MAX_DURATION_HOURS,
        description='Длительность бронирования в часах',
    ),
]
DateQuery = Annotated[
    date,
    Query(alias='date', description='Дата в формате YYYY-MM-DD'),
]


@router.post(
    '/',
    response_model=RestaurantInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_422_UNPROCESSABLE_CONTENT: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Restaurant')
async def create_restaurant(
    restaurant_data: RestaurantCreate,
    session: DbSession,
) -> RestaurantInfo:
    """Создает новый ресторан.

    Время открытия и закрытия проверяются схемой: формат HH:mm и
    открытие раньше закрытия в пределах одних суток.
    """
    try:
        restaurant = await restaurant_repository.create(
            restaurant_data,
            session,
        )
        restaurant = await restaurant_repository.get_or_raise(
            session,
            restaurant.id,
        )
        return RestaurantInfo.model_validate(restaurant)
    except BookingError as e:
        logger.warning(f'Ошибка при создании ресторана: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании ресторана: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании ресторана',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/',
    response_model=list[RestaurantShortInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_restaurants(
    session: DbSession,
) -> list[RestaurantShortInfo]:
    """Получает список ресторанов, упорядоченный по названию."""
    try:
        restaurants = await restaurant_repository.get_multi_ordered(session)
        return [
            RestaurantShortInfo.model_validate(restaurant)
            for restaurant in restaurants
        ]
    except Exception as e:
        logger.error(f'Ошибка при получении списка ресторанов: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{restaurant_id}',
    response_model=RestaurantInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_restaurant_by_id(
    restaurant_id: UUID,
    session: DbSession,
) -> RestaurantInfo:
    """Получает ресторан со списком столов, упорядоченных по номеру.

    Args:
        restaurant_id: UUID идентификатор ресторана
        session: Асинхронная сессия базы данных
    Returns:
        RestaurantInfo: Ресторан со столами
    Raises:
        HTTPException: 404 если ресторан не найден

    """
    try:
        restaurant = await restaurant_repository.get_or_raise(
            session,
            restaurant_id,
        )
        return RestaurantInfo.model_validate(restaurant)
    except BookingError as e:
        logger.warning(f'Ресторан {restaurant_id} не найден')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(
            f'Ошибка при получении ресторана {restaurant_id}: {str(e)}',
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{restaurant_id}/available-slots',
    response_model=AvailableSlotsResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_available_slots(
    restaurant_id: UUID,
    reservation_date: DateQuery,
    party_size: PartySizeQuery,
    session: DbSession,
    availability: Availability,
    duration_hours: DurationQuery = settings.DEFAULT_DURATION_HOURS,
    cache: CacheService = CacheServiceDep,
) -> AvailableSlotsResponse:
    """Получает свободные слоты ресторана на дату с кешированием.

    Кеш слотов сбрасывается при каждом изменении бронирований ресторана
    на эту дату и при изменении его столов.
    """
    try:
        restaurant = await restaurant_repository.get_or_raise(
            session,
            restaurant_id,
        )
        granularity = settings.SLOT_GRANULARITY_MINUTES
        generation = await cache.slots_generation(
            restaurant_id,
            reservation_date,
        )
        cache_key = None
        if generation is not None:
            cache_key = cache.slots_key(
                restaurant_id,
                reservation_date,
                generation,
                party_size,
                duration_hours,
                granularity,
            )
            cached_slots = await cache.get(cache_key)
            if cached_slots is not None:
                return AvailableSlotsResponse.model_validate(cached_slots)
        slots = await availability.get_available_time_slots(
            restaurant.id,
            restaurant.opening_time,
            restaurant.closing_time,
            reservation_date,
            party_size,
            duration_hours,
            granularity,
        )
        response = AvailableSlotsResponse(
            reservation_date=reservation_date,
            party_size=party_size,
            duration_hours=duration_hours,
            available_slots=slots,
        )
        if cache_key is not None:
            await cache.set(cache_key, response.model_dump(mode='json'))
        return response
    except BookingError as e:
        logger.warning(f'Ошибка при поиске свободных слотов: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Ошибка при поиске свободных слотов: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{restaurant_id}/reservations',
    response_model=DayReservations,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_restaurant_reservations(
    restaurant_id: UUID,
    reservation_date: DateQuery,
    session: DbSession,
) -> DayReservations:
    """Получает активные бронирования ресторана на дату."""
    try:
        restaurant = await restaurant_repository.get_or_raise(
            session,
            restaurant_id,
        )
        reservations = await reservation_repository.get_day_reservations(
            session,
            restaurant_id,
            reservation_date,
        )
        return DayReservations(
            reservation_date=reservation_date,
            restaurant_name=restaurant.name,
            reservations=[
                ReservationInfo.from_model(reservation)
                for reservation in reservations
            ],
        )
    except BookingError as e:
        logger.warning(f'Ошибка при получении бронирований: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(
            f'Ошибка при получении бронирований ресторана {restaurant_id}: '
            f'{str(e)}',
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
