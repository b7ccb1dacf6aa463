from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.types import StringConstraints

from restaurant_booking.utils.time_utils import to_minutes
from restaurant_booking.utils.validators import validate_time

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=128,
)


class RestaurantBase(BaseModel):
    """Базовая схема для ресторана с общими полями."""

    name: Annotated[str, NameConstraint]
    opening_time: str
    closing_time: str
    total_tables: Annotated[int, Field(ge=1)]

    @field_validator('name', mode='after')
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Проверяет, что название ресторана передано и не пустое."""
        if not value.strip():
            raise ValueError('Название ресторана не может быть пустым')
        return value.strip()

    @field_validator('opening_time', 'closing_time', mode='after')
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        """Проверяет формат времени работы."""
        return validate_time(value)

    @model_validator(mode='after')
    def check_operating_hours(self) -> 'RestaurantBase':
        """Проверяет, что ресторан открывается раньше, чем закрывается."""
        if to_minutes(self.opening_time) >= to_minutes(self.closing_time):
            raise ValueError(
                'Время открытия должно быть меньше времени закрытия',
            )
        return self


class RestaurantCreate(RestaurantBase):
    """Схема для создания нового ресторана."""


class RestaurantShortInfo(BaseModel):
    """Сокращенная схема ресторана для вложенных объектов."""

    id: UUID
    name: str
    opening_time: str
    closing_time: str
    total_tables: int

    model_config = ConfigDict(from_attributes=True)


class RestaurantInfo(RestaurantShortInfo):
    """Полная схема ресторана со списком столов."""

    tables: list['TableShortInfo'] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Для избежания циклических импортов
from restaurant_booking.schemas.table import TableShortInfo  # noqa: E402

RestaurantInfo.model_rebuild()
