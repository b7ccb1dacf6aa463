from .healthcheck import health_router
from .healthcheck import router as healthcheck_router
from .reservation import router as reservation_router
from .restaurant import router as restaurant_router
from .table import router as table_router

__all__ = [
    'health_router',
    'healthcheck_router',
    'restaurant_router',
    'table_router',
    'reservation_router',
]

routers = [
    health_router,
    healthcheck_router,
    restaurant_router,
    table_router,
    reservation_router,
]
