from .reservation import Reservation
from .restaurant import Restaurant
from .table import Table

__all__ = [
    'Restaurant',
    'Table',
    'Reservation',
]
