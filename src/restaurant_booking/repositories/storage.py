from datetime import date
from typing import Any, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_booking.models import Reservation
from restaurant_booking.repositories.table import table_repository
from restaurant_booking.utils.enums import ReservationStatus


class DbReservationStorage:
    """Хранилище для сервиса доступности поверх сессии SQLAlchemy.

    Бронирования читаются как лёгкие строки (id, статус, время,
    длительность), без загрузки связанных объектов.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def fetch_active_reservations(
        self,
        table_id: UUID,
        reservation_date: date,
    ) -> Sequence[Any]:
        stmt = (
            select(
                Reservation.id,
                Reservation.status,
                Reservation.reservation_time,
                Reservation.duration_hours,
            )
            .where(
                Reservation.table_id == table_id,
                Reservation.reservation_date == reservation_date,
                Reservation.status.in_(ReservationStatus.active()),
            )
            .order_by(Reservation.reservation_time)
        )
        result = await self.session.execute(stmt)
        return result.all()

    async def fetch_tables(
        self,
        restaurant_id: UUID,
        min_capacity: Optional[int] = None,
    ) -> Sequence[Any]:
        return await table_repository.get_active_by_restaurant(
            self.session,
            restaurant_id,
            min_capacity,
        )
