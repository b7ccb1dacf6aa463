import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaurant_booking.core.db import Base
from restaurant_booking.utils.enums import ReservationStatus

if TYPE_CHECKING:
    from restaurant_booking.models import Restaurant, Table


class Reservation(Base):
    """Таблица бронирований столов.

    Отсутствие пересечений активных бронирований одного стола не
    обеспечивается схемой: его проверяет сервис доступности перед каждой
    записью.
    """

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('restaurant.id', ondelete='CASCADE'),
        nullable=False,
    )
    table_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('table.id', ondelete='CASCADE'),
        nullable=False,
    )
    customer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_email: Mapped[str | None] = mapped_column(
        String(254),
        nullable=True,
    )
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    reservation_date: Mapped[date] = mapped_column(Date, nullable=False)
    reservation_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration_hours: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=2.0,
    )
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(
            ReservationStatus,
            name='reservation_status',
            values_callable=lambda enum: [item.value for item in enum],
        ),
        nullable=False,
        default=ReservationStatus.CONFIRMED,
    )

    restaurant: Mapped['Restaurant'] = relationship(
        back_populates='reservations',
        lazy='selectin',
    )
    table: Mapped['Table'] = relationship(lazy='selectin')

    __table_args__ = (
        CheckConstraint('party_size > 0', name='ck_reservation_party_size'),
        CheckConstraint(
            'duration_hours > 0',
            name='ck_reservation_duration',
        ),
        Index(
            'ix_reservation_lookup',
            'restaurant_id',
            'table_id',
            'reservation_date',
            'status',
        ),
        Index('ix_reservation_date', 'restaurant_id', 'reservation_date'),
    )
