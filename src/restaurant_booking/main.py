from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from restaurant_booking.api.endpoints import routers
from restaurant_booking.core.exception_handler import (
    http_exception_handler,
    validation_exception_handler,
)
from restaurant_booking.core.logging import configure_logging
from restaurant_booking.middleware.http_logging import logging_middleware
from restaurant_booking.services.cache_service import cache_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator:
    """Запускает логгер и подключает кеш при старте приложения."""
    configure_logging()
    await cache_service.connect()
    yield
    await cache_service.disconnect()


app = FastAPI(
    title='Система бронирования столов в ресторанах',
    description=(
        'API для бронирования столов: проверка доступности, подбор '
        'свободных слотов и альтернативного времени'
    ),
    version='0.1.0',
    lifespan=lifespan,
    root_path='/api',
)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)

app.middleware('http')(logging_middleware)


for router in routers:
    app.include_router(router)
