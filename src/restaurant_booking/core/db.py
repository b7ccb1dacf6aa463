import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Any, AsyncIterator

from fastapi import Depends
from sqlalchemy import URL, UUID, Boolean, DateTime, func, text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    declared_attr,
    mapped_column,
)

from restaurant_booking.core.config import settings


class Base(DeclarativeBase):
    """Общие колонки ресторанов, столов и бронирований.

    Имя таблицы совпадает с именем модели в нижнем регистре: restaurant,
    table, reservation. Внешние ключи моделей ссылаются на эти имена.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:  # noqa: N805
        return cls.__name__.lower()

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text('true'),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f'<{type(self).__name__} {self.id}>'


def engine_options(url: URL) -> dict[str, Any]:
    """Параметры движка под конкретную СУБД.

    SQLite используется в тестах и для локального запуска: пул
    соединений и блокировки строк ему не нужны. Для PostgreSQL пул
    проверяет соединение перед выдачей, чтобы бронирование не падало
    на оборванном соединении после простоя.
    """
    options: dict[str, Any] = {'echo': settings.DB_ECHO}
    if url.get_backend_name() == 'sqlite':
        return options
    options.update(
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )
    return options


def supports_row_locks(session: AsyncSession) -> bool:
    """Есть ли у СУБД сессии SELECT ... FOR UPDATE."""
    return session.get_bind().dialect.name != 'sqlite'


engine = create_async_engine(settings.db_url, **engine_options(settings.db_url))

SessionFactory = async_sessionmaker(engine, expire_on_commit=False)


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Фиксирует изменения блока или откатывает их при любой ошибке.

    Ошибка, в том числе BookingError из проверок бронирования,
    пробрасывается дальше после отката.
    """
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def get_async_session() -> AsyncIterator[AsyncSession]:
    """Функция для DI, которая создает асинхронную сессию SA."""
    async with SessionFactory() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_async_session)]
