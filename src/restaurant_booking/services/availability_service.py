from datetime import date
from typing import (
    Any,
    AsyncIterator,
    Optional,
    Protocol,
    Sequence,
    runtime_checkable,
)
from uuid import UUID

from loguru import logger

from restaurant_booking.core.constants import (
    DEFAULT_ALTERNATIVES_LIMIT,
    DEFAULT_SLOT_GRANULARITY_MINUTES,
)
from restaurant_booking.schemas.availability import TimeSlot
from restaurant_booking.utils.enums import ReservationStatus
from restaurant_booking.utils.exceptions import InvalidArgumentError
from restaurant_booking.utils.time_utils import (
    DateValue,
    TimeValue,
    generate_time_slots,
    hours_to_minutes,
    overlaps,
    parse_date,
    to_minutes,
    to_time,
)


@runtime_checkable
class ReservationStorage(Protocol):
    """Источник данных о столах и бронированиях для сервиса доступности.

    Реализация обязана возвращать только активные бронирования
    (pending/confirmed) и только активные столы, упорядоченные по номеру.
    Атомарность связки "проверка - запись" также обеспечивает хранилище.
    """

    async def fetch_active_reservations(
        self,
        table_id: UUID,
        reservation_date: date,
    ) -> Sequence[Any]:
        """Активные бронирования стола на дату."""

    async def fetch_tables(
        self,
        restaurant_id: UUID,
        min_capacity: Optional[int] = None,
    ) -> Sequence[Any]:
        """Активные столы ресторана вместимостью не меньше min_capacity."""


def _ensure_positive_int(value: Any, name: str) -> int:
    """Проверяет, что значение - положительное целое число."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(
            f'{name} должно быть положительным целым числом, '
            f'получено: {value!r}',
        )
    return value


class AvailabilityService:
    """Сервис для проверки доступности столов и слотов.

    Сервис не хранит состояние: каждый вызов заново читает бронирования
    через хранилище, поэтому источником истины всегда остаётся журнал
    бронирований. Взаимное исключение параллельных бронирований сервис
    не обеспечивает.
    """

    def __init__(self, storage: ReservationStorage) -> None:
        """Инициализация сервиса с источником данных."""
        self.storage = storage

    async def is_table_available(
        self,
        table_id: UUID,
        reservation_date: DateValue,
        start_time: TimeValue,
        duration_hours: float,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> bool:
        """Проверяет, свободен ли стол на интервал [start, start + duration).

        Args:
            table_id: UUID стола
            reservation_date: Дата бронирования
            start_time: Время начала в формате HH:mm
            duration_hours: Длительность в часах
            exclude_reservation_id: UUID бронирования, которое не учитывается
                                    (при изменении самого бронирования)

        Returns:
            bool: True если ни одно активное бронирование стола на эту дату
                  не пересекается с запрошенным интервалом

        Raises:
            InvalidFormatError: При некорректном времени или дате
            InvalidArgumentError: При неположительной длительности

        """
        booking_date = parse_date(reservation_date)
        start = to_minutes(start_time)
        end = start + hours_to_minutes(duration_hours)
        reservations = await self.storage.fetch_active_reservations(
            table_id,
            booking_date,
        )
        for reservation in reservations:
            if (
                exclude_reservation_id is not None
                and reservation.id == exclude_reservation_id
            ):
                continue
            if reservation.status not in ReservationStatus.active():
                continue
            reservation_start = to_minutes(reservation.reservation_time)
            reservation_end = reservation_start + hours_to_minutes(
                reservation.duration_hours,
            )
            if overlaps(start, end, reservation_start, reservation_end):
                logger.debug(
                    f'Стол {table_id} занят {booking_date} '
                    f'{to_time(reservation_start)}-{to_time(reservation_end)}'
                    f', запрошено {to_time(start)}-{to_time(end)}',
                )
                return False
        return True

    async def get_available_tables(
        self,
        restaurant_id: UUID,
        reservation_date: DateValue,
        start_time: TimeValue,
        duration_hours: float,
        min_capacity: Optional[int] = None,
    ) -> list[Any]:
        """Возвращает свободные на интервал столы ресторана.

        Порядок столов совпадает с порядком хранилища (по номеру стола).
        """
        if min_capacity is not None:
            _ensure_positive_int(min_capacity, 'Минимальная вместимость')
        booking_date = parse_date(reservation_date)
        to_minutes(start_time)
        hours_to_minutes(duration_hours)

        tables = await self.storage.fetch_tables(restaurant_id, min_capacity)
        available_tables = []
        for table in tables:
            if await self.is_table_available(
                table.id,
                booking_date,
                start_time,
                duration_hours,
            ):
                available_tables.append(table)
        return available_tables

    async def iter_available_time_slots(
        self,
        restaurant_id: UUID,
        opening_time: TimeValue,
        closing_time: TimeValue,
        reservation_date: DateValue,
        party_size: int,
        duration_hours: float,
        granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
    ) -> AsyncIterator[TimeSlot]:
        """Лениво перебирает слоты, в которые есть свободные столы.

        Бронирование должно полностью завершиться до закрытия, поэтому
        слоты, чьё окончание выходит за время закрытия, пропускаются.
        Каждый новый вызов начинает перебор заново.
        """
        _ensure_positive_int(party_size, 'Количество гостей')
        _ensure_positive_int(granularity_minutes, 'Шаг слотов')
        booking_date = parse_date(reservation_date)
        duration_minutes = hours_to_minutes(duration_hours)
        closing = to_minutes(closing_time)

        for slot in generate_time_slots(
            opening_time,
            closing,
            granularity_minutes,
        ):
            if to_minutes(slot) + duration_minutes > closing:
                # Следующие слоты начинаются ещё позже.
                break
            tables = await self.get_available_tables(
                restaurant_id,
                booking_date,
                slot,
                duration_hours,
                min_capacity=party_size,
            )
            if tables:
                yield TimeSlot(time=slot, available_tables=len(tables))

    async def get_available_time_slots(
        self,
        restaurant_id: UUID,
        opening_time: TimeValue,
        closing_time: TimeValue,
        reservation_date: DateValue,
        party_size: int,
        duration_hours: float,
        granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
    ) -> list[TimeSlot]:
        """Возвращает слоты со свободными столами в хронологическом порядке."""
        return [
            slot
            async for slot in self.iter_available_time_slots(
                restaurant_id,
                opening_time,
                closing_time,
                reservation_date,
                party_size,
                duration_hours,
                granularity_minutes,
            )
        ]

    async def find_alternative_slots(
        self,
        restaurant_id: UUID,
        opening_time: TimeValue,
        closing_time: TimeValue,
        reservation_date: DateValue,
        requested_time: TimeValue,
        party_size: int,
        duration_hours: float,
        limit: int = DEFAULT_ALTERNATIVES_LIMIT,
        granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
    ) -> list[TimeSlot]:
        """Подбирает ближайшие к запрошенному времени свободные слоты.

        Запрошенное время в выдачу не попадает. При равном удалении раньше
        идёт более ранний слот. Слоты не резервируются, поэтому к моменту
        повторного бронирования предложенное время может оказаться занято.
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidArgumentError(
                'Количество альтернатив должно быть неотрицательным целым '
                f'числом, получено: {limit!r}',
            )
        requested = to_minutes(requested_time)
        slots = await self.get_available_time_slots(
            restaurant_id,
            opening_time,
            closing_time,
            reservation_date,
            party_size,
            duration_hours,
            granularity_minutes,
        )
        candidates = [slot for slot in slots if to_minutes(slot.time) != requested]
        candidates.sort(key=lambda slot: abs(to_minutes(slot.time) - requested))
        return candidates[:limit]
