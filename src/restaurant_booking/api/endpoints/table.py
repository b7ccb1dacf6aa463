from datetime import date
from typing import Annotated, Optional
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
from restaurant_booking.repositories.restaurant import restaurant_repository
from restaurant_booking.repositories.table import table_repository
from restaurant_booking.schemas.availability import TableAvailabilityResponse
from restaurant_booking.schemas.common import ErrorResponse
from restaurant_booking.schemas.table import (
    RankedTable,
    TableCreate,
    TableInfo,
    TableUpdate,
)
from restaurant_booking.services.cache_service import CacheService
from restaurant_booking.services.table_optimization import (
    table_optimization_service,
)
from restaurant_booking.utils.exceptions import BookingError
from restaurant_booking.utils.http import build_booking_error, build_error
from restaurant_booking.utils.logging_decorator import event_logger
from restaurant_booking.utils.validators import validate_time

router = APIRouter(
    prefix='/restaurants/{restaurant_id}/tables',
    tags=['Столы'],
)


@router.get(
    '/',
    response_model=list[TableInfo],
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_tables(
    restaurant_id: UUID,
    session: DbSession,
    show_all: bool = Query(
        True,
        description='Показывать и столы, выведенные из работы?',
    ),
) -> list[TableInfo]:
    """Получает список столов ресторана, упорядоченный по номеру.

    Args:
        restaurant_id: UUID идентификатор ресторана
        session: Асинхронная сессия базы данных
        show_all: Флаг показа всех столов (включая неактивные)

    Returns:
        list[TableInfo]: Список столов ресторана
    Raises:
        HTTPException: 404 если ресторан не найден

    """
    try:
        await restaurant_repository.get_or_raise(session, restaurant_id)
        tables = await table_repository.get_multi_by_restaurant(
            session,
            restaurant_id,
            show_all=show_all,
        )
        return [TableInfo.model_validate(table) for table in tables]
    except BookingError as e:
        logger.warning(f'Ошибка при получении столов: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Ошибка при получении списка столов: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/',
    response_model=TableInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_409_CONFLICT: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Table')
async def create_table(
    restaurant_id: UUID,
    table_data: TableCreate,
    session: DbSession,
    cache: CacheService = CacheServiceDep,
) -> TableInfo:
    """Добавляет стол в ресторан.

    Raises:
        HTTPException: 404 если ресторан не найден
        HTTPException: 409 если стол с таким номером уже есть

    """
    try:
        table = await table_repository.create_for_restaurant(
            session,
            restaurant_id,
            table_data,
        )
        await cache.invalidate_restaurant_slots(restaurant_id)
        return TableInfo.model_validate(table)
    except BookingError as e:
        logger.warning(f'Ошибка при создании стола: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании стола: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании стола',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/available',
    response_model=TableAvailabilityResponse,
    response_model_exclude_none=True,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_available_tables(
    restaurant_id: UUID,
    session: DbSession,
    availability: Availability,
    reservation_date: Annotated[
        date,
        Query(alias='date', description='Дата в формате YYYY-MM-DD'),
    ],
    reservation_time: Annotated[
        str,
        Query(alias='time', description='Время начала в формате HH:mm'),
    ],
    duration_hours: Annotated[
        float,
        Query(
            alias='duration',
            ge=MIN_DURATION_HOURS,
            le=MAX_DURATION_HOURS,
        ),
    ] = settings.DEFAULT_DURATION_HOURS,
    party_size: Annotated[
        Optional[int],
        Query(ge=MIN_PARTY_SIZE, le=MAX_PARTY_SIZE),
    ] = None,
) -> TableAvailabilityResponse:
    """Получает свободные столы ресторана на указанное время.

    Если передано количество гостей, столы ранжируются по числу пустующих
    мест, а при отсутствии свободных столов подбираются ближайшие
    альтернативные слоты.
    """
    try:
        validate_time(reservation_time)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(
                str(e),
                status.HTTP_400_BAD_REQUEST,
                'INVALID_TIME_FORMAT',
            ),
        )
    try:
        restaurant = await restaurant_repository.get_or_raise(
            session,
            restaurant_id,
        )
        tables = await availability.get_available_tables(
            restaurant.id,
            reservation_date,
            reservation_time,
            duration_hours,
            min_capacity=party_size,
        )
        if party_size is None:
            ranked = [RankedTable.model_validate(table) for table in tables]
            return TableAvailabilityResponse(
                available=bool(ranked),
                tables=ranked,
            )
        ranked = table_optimization_service.rank_tables(tables, party_size)
        alternative_slots = None
        if not ranked:
            alternative_slots = await availability.find_alternative_slots(
                restaurant.id,
                restaurant.opening_time,
                restaurant.closing_time,
                reservation_date,
                reservation_time,
                party_size,
                duration_hours,
                limit=settings.ALTERNATIVE_SLOTS_LIMIT,
                granularity_minutes=settings.SLOT_GRANULARITY_MINUTES,
            )
        return TableAvailabilityResponse(
            available=bool(ranked),
            tables=ranked,
            alternative_slots=alternative_slots,
        )
    except BookingError as e:
        logger.warning(f'Ошибка при поиске свободных столов: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Ошибка при поиске свободных столов: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.patch(
    '/{table_id}',
    response_model=TableInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'Table')
async def update_table(
    restaurant_id: UUID,
    table_id: UUID,
    update_data: TableUpdate,
    session: DbSession,
    cache: CacheService = CacheServiceDep,
) -> TableInfo:
    """Меняет вместимость стола или выводит его из работы.

    Существующие бронирования стола при этом не меняются.
    """
    try:
        table = await table_repository.get_for_restaurant(
            session,
            restaurant_id,
            table_id,
        )
        table = await table_repository.update_obj(table, update_data, session)
        await cache.invalidate_restaurant_slots(restaurant_id)
        return TableInfo.model_validate(table)
    except BookingError as e:
        logger.warning(f'Ошибка при обновлении стола: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Неожиданная ошибка при обновлении стола: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при обновлении стола',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
