import asyncio
from collections import Counter
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, AsyncIterator, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant_booking.core.db import atomic
from restaurant_booking.models import Reservation, Restaurant, Table
from restaurant_booking.repositories.base import CRUDBase
from restaurant_booking.repositories.restaurant import restaurant_repository
from restaurant_booking.repositories.storage import DbReservationStorage
from restaurant_booking.repositories.table import table_repository
from restaurant_booking.schemas.reservation import (
    ReservationCreate,
    ReservationUpdate,
)
from restaurant_booking.services.availability_service import (
    AvailabilityService,
)
from restaurant_booking.utils.enums import ReservationStatus
from restaurant_booking.utils.exceptions import (
    BookingError,
    ConflictError,
    NotFoundError,
)
from restaurant_booking.utils.time_utils import (
    end_minutes,
    is_within,
    overlaps,
    to_minutes,
    to_time,
)

NOT_NULL_FIELDS = (
    'customer_name',
    'customer_phone',
    'party_size',
    'reservation_date',
    'reservation_time',
    'duration_hours',
    'status',
)


class ReservationRepository(
    CRUDBase[Reservation, ReservationCreate, ReservationUpdate],
):
    """Репозиторий для операций с бронированиями.

    Последовательность "проверка доступности - запись" для одного стола
    выполняется под блокировкой: в пределах процесса это asyncio.Lock
    на стол, между процессами - SELECT ... FOR UPDATE по строке стола
    (на PostgreSQL).
    """

    def __init__(self) -> None:
        """Инициализация репозитория бронирований."""
        super().__init__(Reservation)
        self._table_locks: dict[UUID, asyncio.Lock] = {}
        self._lock_holders: Counter[UUID] = Counter()

    @asynccontextmanager
    async def _table_lock(self, table_id: UUID) -> AsyncIterator[None]:
        """Блокировка стола, живущая, пока её кто-то держит или ждёт."""
        lock = self._table_locks.setdefault(table_id, asyncio.Lock())
        self._lock_holders[table_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[table_id] -= 1
            if not self._lock_holders[table_id]:
                del self._lock_holders[table_id]
                del self._table_locks[table_id]

    async def get_with_relations(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Optional[Reservation]:
        """Получает бронирование вместе со столом и рестораном."""
        return await self.get(
            session,
            id=reservation_id,
            options=[
                selectinload(Reservation.table),
                selectinload(Reservation.restaurant),
            ],
        )

    async def get_or_raise(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Reservation:
        """Возвращает бронирование или выбрасывает NotFoundError."""
        reservation = await self.get_with_relations(session, reservation_id)
        if reservation is None:
            raise NotFoundError('Бронирование не найдено', reservation_id)
        return reservation

    async def get_day_reservations(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        reservation_date: date,
    ) -> List[Reservation]:
        """Активные бронирования ресторана на дату по времени начала."""
        return await self.get(
            session,
            Reservation.restaurant_id == restaurant_id,
            Reservation.reservation_date == reservation_date,
            Reservation.status.in_(ReservationStatus.active()),
            many=True,
            order_by=(Reservation.reservation_time, Reservation.created_at),
            options=[selectinload(Reservation.table)],
        )

    async def create_with_validation(
        self,
        session: AsyncSession,
        obj_in: ReservationCreate,
    ) -> Reservation:
        """Создает бронирование после проверки правил и доступности стола.

        Raises:
            NotFoundError: Если ресторан или стол не найдены
            BookingError: При нарушении правил бронирования
            ConflictError: Если стол занят на запрошенное время

        """
        restaurant = await restaurant_repository.get_or_raise(
            session,
            obj_in.restaurant_id,
        )
        async with self._table_lock(obj_in.table_id), atomic(session):
            table = await table_repository.get_for_restaurant(
                session,
                restaurant.id,
                obj_in.table_id,
                for_update=True,
            )
            self._check_table(table, obj_in.party_size)
            self._check_operating_hours(
                restaurant,
                obj_in.reservation_time,
                obj_in.duration_hours,
            )
            await self._ensure_available(
                session,
                table,
                obj_in.reservation_date,
                obj_in.reservation_time,
                obj_in.duration_hours,
            )
            db_obj = self.model(
                **obj_in.model_dump(),
                status=ReservationStatus.CONFIRMED,
            )
            session.add(db_obj)
        return await self.get_or_raise(session, db_obj.id)

    async def update_with_validation(
        self,
        session: AsyncSession,
        db_obj: Reservation,
        obj_in: ReservationUpdate,
    ) -> tuple[Reservation, list[str]]:
        """Обновляет бронирование с повторной проверкой доступности.

        Доступность перепроверяется, если меняются дата, время или
        длительность, а также при возврате бронирования в активный статус.
        Само бронирование в проверке не учитывается.

        Returns:
            Обновленное бронирование и список внесенных изменений

        """
        if db_obj.status == ReservationStatus.CANCELLED:
            raise BookingError(
                'Нельзя изменить отмененное бронирование',
                code='RESERVATION_CANCELLED',
            )
        update_data = {
            field: value
            for field, value in obj_in.model_dump(exclude_unset=True).items()
            if value is not None or field not in NOT_NULL_FIELDS
        }
        changes = self._describe_changes(db_obj, update_data)
        if not changes:
            return db_obj, changes

        async with self._table_lock(db_obj.table_id), atomic(session):
            table = await table_repository.get_for_restaurant(
                session,
                db_obj.restaurant_id,
                db_obj.table_id,
                for_update=True,
            )
            new_values = {
                field: update_data.get(field, getattr(db_obj, field))
                for field in (
                    'party_size',
                    'reservation_date',
                    'reservation_time',
                    'duration_hours',
                    'status',
                )
            }
            if 'party_size' in update_data:
                self._check_capacity(table, new_values['party_size'])
            interval_changed = any(
                field in update_data
                for field in (
                    'reservation_date',
                    'reservation_time',
                    'duration_hours',
                )
            )
            reactivated = (
                db_obj.status not in ReservationStatus.active()
                and new_values['status'] in ReservationStatus.active()
            )
            if interval_changed or reactivated:
                self._check_operating_hours(
                    db_obj.restaurant,
                    new_values['reservation_time'],
                    new_values['duration_hours'],
                )
            if (
                interval_changed or reactivated
            ) and new_values['status'] in ReservationStatus.active():
                await self._ensure_available(
                    session,
                    table,
                    new_values['reservation_date'],
                    new_values['reservation_time'],
                    new_values['duration_hours'],
                    exclude_reservation_id=db_obj.id,
                )
            for field, value in update_data.items():
                setattr(db_obj, field, value)
            session.add(db_obj)
        return await self.get_or_raise(session, db_obj.id), changes

    async def cancel(
        self,
        session: AsyncSession,
        db_obj: Reservation,
    ) -> Reservation:
        """Отменяет бронирование. Отмена необратима, запись не удаляется."""
        if db_obj.status == ReservationStatus.CANCELLED:
            raise BookingError(
                'Бронирование уже отменено',
                code='ALREADY_CANCELLED',
            )
        async with self._table_lock(db_obj.table_id), atomic(session):
            db_obj.status = ReservationStatus.CANCELLED
            session.add(db_obj)
        return await self.get_or_raise(session, db_obj.id)

    @staticmethod
    def _check_table(table: Table, party_size: int) -> None:
        if not table.is_active:
            raise BookingError(
                'Стол выведен из работы и недоступен для бронирования',
                code='TABLE_INACTIVE',
                details={'table_number': table.table_number},
            )
        ReservationRepository._check_capacity(table, party_size)

    @staticmethod
    def _check_capacity(table: Table, party_size: int) -> None:
        if party_size > table.capacity:
            raise BookingError(
                f'Количество гостей ({party_size}) превышает '
                f'вместимость стола ({table.capacity})',
                code='PARTY_SIZE_EXCEEDS_CAPACITY',
                details={
                    'party_size': party_size,
                    'table_capacity': table.capacity,
                    'suggested_action': (
                        'Выберите стол побольше или уменьшите '
                        'количество гостей'
                    ),
                },
            )

    @staticmethod
    def _check_operating_hours(
        restaurant: Restaurant,
        reservation_time: str,
        duration_hours: float,
    ) -> None:
        """Проверяет, что бронирование помещается в часы работы.

        Окончание после полуночи считается выходом за время закрытия:
        рестораны работают в пределах одних суток.
        """
        if not is_within(
            reservation_time,
            restaurant.opening_time,
            restaurant.closing_time,
        ):
            raise BookingError(
                'Время бронирования вне часов работы ресторана',
                code='OUTSIDE_OPERATING_HOURS',
                details={
                    'requested_time': reservation_time,
                    'operating_hours': (
                        f'{restaurant.opening_time} - '
                        f'{restaurant.closing_time}'
                    ),
                },
            )
        end = end_minutes(reservation_time, duration_hours)
        if end > to_minutes(restaurant.closing_time):
            raise BookingError(
                'Бронирование заканчивается после закрытия ресторана',
                code='EXTENDS_PAST_CLOSING',
                details={
                    'reservation_end': to_time(end),
                    'closing_time': restaurant.closing_time,
                },
            )

    async def _ensure_available(
        self,
        session: AsyncSession,
        table: Table,
        reservation_date: date,
        reservation_time: str,
        duration_hours: float,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> None:
        storage = DbReservationStorage(session)
        if await AvailabilityService(storage).is_table_available(
            table.id,
            reservation_date,
            reservation_time,
            duration_hours,
            exclude_reservation_id=exclude_reservation_id,
        ):
            return
        conflicting = await self._find_conflicting(
            storage,
            table.id,
            reservation_date,
            reservation_time,
            duration_hours,
            exclude_reservation_id,
        )
        raise ConflictError(
            'Стол занят на запрошенное время',
            details={
                'requested_time': reservation_time,
                'requested_duration': duration_hours,
                'conflicting_reservation': conflicting,
            },
        )

    @staticmethod
    async def _find_conflicting(
        storage: DbReservationStorage,
        table_id: UUID,
        reservation_date: date,
        reservation_time: str,
        duration_hours: float,
        exclude_reservation_id: Optional[UUID],
    ) -> Optional[dict[str, Any]]:
        """Первое пересекающееся активное бронирование стола."""
        start = to_minutes(reservation_time)
        end = end_minutes(reservation_time, duration_hours)
        for reservation in await storage.fetch_active_reservations(
            table_id,
            reservation_date,
        ):
            if reservation.id == exclude_reservation_id:
                continue
            if overlaps(
                start,
                end,
                reservation.reservation_time,
                end_minutes(
                    reservation.reservation_time,
                    reservation.duration_hours,
                ),
            ):
                return {
                    'id': str(reservation.id),
                    'time': reservation.reservation_time,
                    'duration': reservation.duration_hours,
                }
        return None

    @staticmethod
    def _describe_changes(
        db_obj: Reservation,
        update_data: dict[str, Any],
    ) -> list[str]:
        """Формирует список изменений для уведомления клиента."""
        labels = {
            'customer_name': 'Имя изменено на {}',
            'customer_phone': 'Телефон изменен на {}',
            'customer_email': 'Email изменен на {}',
            'party_size': 'Количество гостей изменено на {}',
            'reservation_date': 'Дата изменена на {}',
            'reservation_time': 'Время изменено на {}',
            'duration_hours': 'Длительность изменена на {} ч',
            'status': 'Статус изменен на {}',
        }
        changes = []
        for field, template in labels.items():
            if field not in update_data:
                continue
            value = update_data[field]
            if value == getattr(db_obj, field):
                continue
            if isinstance(value, ReservationStatus):
                value = value.value
            changes.append(template.format(value))
        return changes


reservation_repository = ReservationRepository()
