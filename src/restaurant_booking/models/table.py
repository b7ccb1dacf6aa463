import uuid
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restaurant_booking.core.db import Base

if TYPE_CHECKING:
    from restaurant_booking.models import Restaurant


class Table(Base):
    """Таблица столиков для бронирования.

    Флаг is_active отмечает стол, выведенный из работы (ремонт, удаление),
    и не зависит от бронирований.
    """

    restaurant_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('restaurant.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    restaurant: Mapped['Restaurant'] = relationship(
        back_populates='tables',
        lazy='noload',
    )

    __table_args__ = (
        UniqueConstraint(
            'restaurant_id',
            'table_number',
            name='uq_table_number_per_restaurant',
        ),
        CheckConstraint('capacity > 0', name='ck_table_capacity'),
    )
