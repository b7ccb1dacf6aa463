from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from restaurant_booking.core.constants import DEFAULT_REMINDER_MINUTES
from restaurant_booking.core.db import DbSession
from restaurant_booking.core.dependencies import CacheServiceDep
from restaurant_booking.models import Reservation
from restaurant_booking.repositories.reservation import reservation_repository
from restaurant_booking.schemas.common import ErrorResponse, MessageResponse
from restaurant_booking.schemas.reservation import (
    ReservationCancelled,
    ReservationCreate,
    ReservationInfo,
    ReservationUpdate,
)
from restaurant_booking.services.cache_service import CacheService
from restaurant_booking.services.reservation_notifications import (
    NotificationService,
)
from restaurant_booking.utils.enums import ReservationStatus
from restaurant_booking.utils.exceptions import BookingError
from restaurant_booking.utils.http import build_booking_error, build_error
from restaurant_booking.utils.logging_decorator import event_logger

router = APIRouter(prefix='/reservations', tags=['Бронирования'])


async def _invalidate_slots(
    cache: CacheService,
    reservation: Reservation,
    *previous_dates: object,
) -> None:
    """Сбрасывает кеш слотов на даты, затронутые изменением."""
    dates = {reservation.reservation_date, *previous_dates}
    for reservation_date in dates:
        await cache.invalidate_slots(
            reservation.restaurant_id,
            reservation_date,
        )


@router.post(
    '/',
    response_model=ReservationInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_409_CONFLICT: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Reservation')
async def create_reservation(
    reservation_data: ReservationCreate,
    session: DbSession,
    cache: CacheService = CacheServiceDep,
) -> ReservationInfo:
    """Создает бронирование с проверкой правил и доступности стола.

    Args:
        reservation_data: Данные для создания бронирования
        session: Асинхронная сессия базы данных
        cache: Сервис кеширования
    Returns:
        ReservationInfo: Созданное бронирование
    Raises:
        HTTPException: 404 если ресторан или стол не найдены
        HTTPException: 400 если гостей больше, чем мест за столом
        HTTPException: 400 если время вне часов работы ресторана
        HTTPException: 409 если стол занят на запрошенное время

    """
    try:
        reservation = await reservation_repository.create_with_validation(
            session,
            reservation_data,
        )
        await _invalidate_slots(cache, reservation)
        try:
            NotificationService.send_confirmation(
                reservation,
                reservation.restaurant.name,
            )
        except Exception as e:
            logger.error(f'Ошибка отправки уведомления: {str(e)}')
        return ReservationInfo.from_model(reservation)
    except BookingError as e:
        logger.warning(f'Бронирование не создано: {e.code} {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании бронирования: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании бронирования',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{reservation_id}',
    response_model=ReservationInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_reservation_by_id(
    reservation_id: UUID,
    session: DbSession,
) -> ReservationInfo:
    """Получает бронирование с номером стола и временем окончания."""
    try:
        reservation = await reservation_repository.get_or_raise(
            session,
            reservation_id,
        )
        return ReservationInfo.from_model(reservation)
    except BookingError as e:
        logger.warning(f'Бронирование {reservation_id} не найдено')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(
            f'Ошибка при получении бронирования {reservation_id}: {str(e)}',
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.patch(
    '/{reservation_id}',
    response_model=ReservationInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_409_CONFLICT: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'Reservation')
async def update_reservation(
    reservation_id: UUID,
    update_data: ReservationUpdate,
    session: DbSession,
    cache: CacheService = CacheServiceDep,
) -> ReservationInfo:
    """Обновляет бронирование.

    При изменении даты, времени или длительности доступность стола
    проверяется заново, без учета самого бронирования. Отмененное
    бронирование изменить нельзя.
    """
    try:
        reservation = await reservation_repository.get_or_raise(
            session,
            reservation_id,
        )
        previous_date = reservation.reservation_date
        (
            reservation,
            changes,
        ) = await reservation_repository.update_with_validation(
            session,
            reservation,
            update_data,
        )
        if changes:
            await _invalidate_slots(cache, reservation, previous_date)
            try:
                NotificationService.send_update_notification(
                    reservation,
                    reservation.restaurant.name,
                    changes,
                )
            except Exception as e:
                logger.error(f'Ошибка отправки уведомления: {str(e)}')
        return ReservationInfo.from_model(reservation)
    except BookingError as e:
        logger.warning(f'Бронирование не обновлено: {e.code} {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(
            f'Неожиданная ошибка при обновлении бронирования: {str(e)}',
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при обновлении бронирования',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.delete(
    '/{reservation_id}',
    response_model=ReservationCancelled,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def cancel_reservation(
    reservation_id: UUID,
    session: DbSession,
    cache: CacheService = CacheServiceDep,
) -> ReservationCancelled:
    """Отменяет бронирование и освобождает стол.

    Запись не удаляется: статус меняется на cancelled, вернуть
    бронирование в активный статус нельзя.
    """
    try:
        reservation = await reservation_repository.get_or_raise(
            session,
            reservation_id,
        )
        reservation = await reservation_repository.cancel(session, reservation)
        await _invalidate_slots(cache, reservation)
        try:
            NotificationService.send_cancellation(
                reservation,
                reservation.restaurant.name,
            )
        except Exception as e:
            logger.error(f'Ошибка отправки уведомления: {str(e)}')
        logger.bind(audit=True).info(
            f'Бронирование {reservation_id} отменено',
        )
        return ReservationCancelled(
            message='Бронирование успешно отменено',
            reservation_id=reservation_id,
        )
    except BookingError as e:
        logger.warning(f'Бронирование не отменено: {e.code} {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Ошибка при отмене бронирования: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при отмене бронирования',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/{reservation_id}/reminder',
    response_model=MessageResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def schedule_reservation_reminder(
    reservation_id: UUID,
    session: DbSession,
    reminder_minutes: int = Query(
        DEFAULT_REMINDER_MINUTES,
        ge=0,
        description='За сколько минут напоминать',
    ),
) -> MessageResponse:
    """Планирует напоминание клиенту о бронировании."""
    try:
        reservation = await reservation_repository.get_or_raise(
            session,
            reservation_id,
        )
        if reservation.status == ReservationStatus.CANCELLED:
            raise BookingError(
                'Нельзя напомнить об отмененном бронировании',
                code='RESERVATION_CANCELLED',
            )
        NotificationService.send_reminder(
            reservation,
            reservation.restaurant.name,
            reminder_minutes,
        )
        return MessageResponse(
            message=(
                f'Напоминание запланировано за {reminder_minutes} '
                'минут до бронирования'
            ),
        )
    except BookingError as e:
        logger.warning(f'Напоминание не запланировано: {e.message}')
        raise HTTPException(
            status_code=e.status_code,
            detail=build_booking_error(e),
        )
    except Exception as e:
        logger.error(f'Ошибка планирования напоминания: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Ошибка планирования напоминания',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
