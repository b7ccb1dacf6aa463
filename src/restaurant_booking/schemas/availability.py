from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from restaurant_booking.schemas.table import RankedTable, TableShortInfo
from restaurant_booking.utils.enums import CombinationStatus


class TimeSlot(BaseModel):
    """Время начала слота и количество свободных в это время столов."""

    time: str
    available_tables: int


class AvailableSlotsResponse(BaseModel):
    """Свободные слоты ресторана на дату."""

    reservation_date: date
    party_size: int
    duration_hours: float
    available_slots: list[TimeSlot]


class TableAvailabilityResponse(BaseModel):
    """Результат проверки свободных столов на конкретное время."""

    available: bool
    tables: list[RankedTable]
    alternative_slots: Optional[list[TimeSlot]] = None


class Utilization(BaseModel):
    """Показатели заполнения стола компанией."""

    utilization_percent: float
    wasted_seats: int


class TableCombinations(BaseModel):
    """Результат подбора комбинаций столов для большой компании.

    Объединение столов пока не реализовано, поэтому результат всегда
    помечен как not_supported и не содержит комбинаций.
    """

    status: CombinationStatus = CombinationStatus.NOT_SUPPORTED
    combinations: list[list[TableShortInfo]] = Field(default_factory=list)
