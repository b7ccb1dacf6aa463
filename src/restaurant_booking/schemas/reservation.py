from datetime import date, datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)
from pydantic.types import StringConstraints

from restaurant_booking.core.constants import (
    DEFAULT_DURATION_HOURS,
    MAX_DURATION_HOURS,
    MAX_PARTY_SIZE,
    MIN_DURATION_HOURS,
    MIN_PARTY_SIZE,
)
from restaurant_booking.utils.enums import ReservationStatus
from restaurant_booking.utils.time_utils import add_duration
from restaurant_booking.utils.validators import (
    validate_email,
    validate_phone,
    validate_time,
)

CustomerNameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=128,
)
PartySize = Field(ge=MIN_PARTY_SIZE, le=MAX_PARTY_SIZE)
DurationHours = Field(ge=MIN_DURATION_HOURS, le=MAX_DURATION_HOURS)


class ReservationCreate(BaseModel):
    """Схема для создания нового бронирования."""

    restaurant_id: UUID
    table_id: UUID
    customer_name: Annotated[str, CustomerNameConstraint]
    customer_phone: str
    customer_email: Optional[str] = None
    party_size: Annotated[int, PartySize]
    reservation_date: date
    reservation_time: str
    duration_hours: Annotated[float, DurationHours] = DEFAULT_DURATION_HOURS

    @field_validator('customer_phone', mode='after')
    @classmethod
    def validate_phone_number(cls, value: str) -> str:
        """Проверяет корректность формата номера телефона."""
        return validate_phone(value)

    @field_validator('customer_email', mode='after')
    @classmethod
    def validate_customer_email(cls, value: Optional[str]) -> Optional[str]:
        """Проверяет email клиента, пустые строки приводит к None."""
        return validate_email(value)

    @field_validator('reservation_time', mode='after')
    @classmethod
    def validate_reservation_time(cls, value: str) -> str:
        """Проверяет формат времени бронирования."""
        return validate_time(value)


class ReservationUpdate(BaseModel):
    """Схема для обновления существующего бронирования."""

    customer_name: Optional[Annotated[str, CustomerNameConstraint]] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    party_size: Optional[Annotated[int, PartySize]] = None
    reservation_date: Optional[date] = None
    reservation_time: Optional[str] = None
    duration_hours: Optional[Annotated[float, DurationHours]] = None
    status: Optional[ReservationStatus] = None

    @field_validator('customer_phone', mode='after')
    @classmethod
    def validate_phone_number(cls, value: Optional[str]) -> Optional[str]:
        """Проверяет корректность формата номера телефона."""
        if value is None:
            return None
        return validate_phone(value)

    @field_validator('customer_email', mode='after')
    @classmethod
    def validate_customer_email(cls, value: Optional[str]) -> Optional[str]:
        """Проверяет email клиента."""
        return validate_email(value)

    @field_validator('reservation_time', mode='after')
    @classmethod
    def validate_reservation_time(cls, value: Optional[str]) -> Optional[str]:
        """Проверяет формат времени бронирования."""
        if value is None:
            return None
        return validate_time(value)

    @field_validator('status', mode='after')
    @classmethod
    def validate_status(
        cls,
        value: Optional[ReservationStatus],
    ) -> Optional[ReservationStatus]:
        """Запрещает отмену через обновление: для неё есть DELETE."""
        if value == ReservationStatus.CANCELLED:
            raise ValueError(
                'Для отмены бронирования используйте DELETE '
                '/reservations/{reservation_id}',
            )
        return value


class ReservationInfo(BaseModel):
    """Полная схема бронирования с номером стола и временем окончания."""

    id: UUID
    restaurant_id: UUID
    table_id: UUID
    table_number: Optional[int] = None
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    party_size: int
    reservation_date: date
    reservation_time: str
    duration_hours: float
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def end_time(self) -> str:
        """Время окончания бронирования."""
        return add_duration(self.reservation_time, self.duration_hours)

    @classmethod
    def from_model(cls, reservation: object) -> 'ReservationInfo':
        """Собирает схему из ORM-объекта, подтягивая номер стола."""
        info = cls.model_validate(reservation)
        table = getattr(reservation, 'table', None)
        if table is not None:
            info.table_number = table.table_number
        return info


class DayReservations(BaseModel):
    """Активные бронирования ресторана на дату."""

    reservation_date: date
    restaurant_name: str
    reservations: list[ReservationInfo]


class ReservationCancelled(BaseModel):
    """Ответ на отмену бронирования."""

    message: str
    reservation_id: UUID
