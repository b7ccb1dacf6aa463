from enum import Enum


class ReservationStatus(str, Enum):
    """Enum класс для статусов бронирований."""

    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @classmethod
    def active(cls) -> tuple['ReservationStatus', ...]:
        """Статусы, которые участвуют в проверке пересечений."""
        return (cls.PENDING, cls.CONFIRMED)


class CombinationStatus(str, Enum):
    """Enum класс для результата подбора комбинаций столов."""

    NOT_SUPPORTED = 'not_supported'
