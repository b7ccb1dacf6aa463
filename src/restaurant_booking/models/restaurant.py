from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaurant_booking.core.db import Base

if TYPE_CHECKING:
    from restaurant_booking.models import Reservation, Table


class Restaurant(Base):
    """Таблица ресторанов."""

    name: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
    )
    opening_time: Mapped[str] = mapped_column(String(5), nullable=False)
    closing_time: Mapped[str] = mapped_column(String(5), nullable=False)
    total_tables: Mapped[int] = mapped_column(Integer, nullable=False)

    tables: Mapped[List['Table']] = relationship(
        back_populates='restaurant',
        order_by='Table.table_number',
        cascade='all, delete-orphan',
        lazy='selectin',
    )
    reservations: Mapped[List['Reservation']] = relationship(
        back_populates='restaurant',
        cascade='all, delete-orphan',
        lazy='noload',
    )

    __table_args__ = (
        CheckConstraint(
            'opening_time < closing_time',
            name='ck_restaurant_hours',
        ),
    )
