"""Модуль схем Pydantic для валидации и сериализации данных.

Содержит схемы для всех сущностей системы:
- Рестораны (Restaurant)
- Столы (Table)
- Бронирования (Reservation)
- Слоты и результаты проверки доступности (Availability)

Время передаётся строками HH:mm, даты - YYYY-MM-DD, длительность -
в часах.
"""

from .availability import (
    AvailableSlotsResponse,
    TableAvailabilityResponse,
    TableCombinations,
    TimeSlot,
    Utilization,
)
from .common import ErrorResponse, MessageResponse
from .reservation import (
    DayReservations,
    ReservationCancelled,
    ReservationCreate,
    ReservationInfo,
    ReservationUpdate,
)
from .restaurant import RestaurantCreate, RestaurantInfo, RestaurantShortInfo
from .table import (
    RankedTable,
    TableCreate,
    TableInfo,
    TableShortInfo,
    TableUpdate,
)

__all__ = [
    'RestaurantCreate',
    'RestaurantInfo',
    'RestaurantShortInfo',
    'TableCreate',
    'TableInfo',
    'TableShortInfo',
    'TableUpdate',
    'RankedTable',
    'ReservationCreate',
    'ReservationInfo',
    'ReservationUpdate',
    'ReservationCancelled',
    'DayReservations',
    'TimeSlot',
    'AvailableSlotsResponse',
    'TableAvailabilityResponse',
    'TableCombinations',
    'Utilization',
    'ErrorResponse',
    'MessageResponse',
]
