from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from restaurant_booking.core.constants import (
    MAX_TABLE_CAPACITY,
    MIN_TABLE_CAPACITY,
)

PositiveTableNumber = Field(ge=1)
TableCapacity = Field(ge=MIN_TABLE_CAPACITY, le=MAX_TABLE_CAPACITY)


class TableBase(BaseModel):
    """Базовая схема для стола с общими полями."""

    table_number: Annotated[int, PositiveTableNumber]
    capacity: Annotated[int, TableCapacity]


class TableCreate(TableBase):
    """Схема для создания нового стола."""


class TableUpdate(BaseModel):
    """Схема для обновления существующего стола."""

    capacity: Optional[Annotated[int, TableCapacity]] = None
    is_active: Optional[bool] = None


class TableShortInfo(BaseModel):
    """Сокращенная схема стола для вложенных объектов."""

    id: UUID
    restaurant_id: UUID
    table_number: int
    capacity: int
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class TableInfo(TableShortInfo):
    """Полная схема стола."""

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RankedTable(TableShortInfo):
    """Стол, подходящий для компании, с отметкой оптимальности."""

    is_optimal: bool = False
