from .base import CRUDBase
from .reservation import ReservationRepository, reservation_repository
from .restaurant import RestaurantRepository, restaurant_repository
from .storage import DbReservationStorage
from .table import TableRepository, table_repository

__all__ = [
    'CRUDBase',
    'RestaurantRepository',
    'restaurant_repository',
    'TableRepository',
    'table_repository',
    'ReservationRepository',
    'reservation_repository',
    'DbReservationStorage',
]
