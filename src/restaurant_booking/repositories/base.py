from typing import Any, Generic, Iterable, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Load

from restaurant_booking.core.db import Base, atomic, supports_row_locks
from restaurant_booking.utils.exceptions import InvalidArgumentError

ModelT = TypeVar('ModelT', bound=Base)
CreateSchemaT = TypeVar('CreateSchemaT', bound=BaseModel)
UpdateSchemaT = TypeVar('UpdateSchemaT', bound=BaseModel)


class CRUDBase(Generic[ModelT, CreateSchemaT, UpdateSchemaT]):
    """Базовый класс для CRUD операций."""

    def __init__(self, model: Type[ModelT]) -> None:
        """Инициализация класса."""
        self.model = model

    async def get(
        self,
        session: AsyncSession,
        *predicates: Any,
        many: bool = False,
        order_by: Sequence[Any] = (),
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        options: Iterable[Load] = (),
        for_update: bool = False,
        **filters: Any,
    ) -> list[ModelT] | ModelT:
        """Универсальная выборка по равенствам полям модели.

        get(..., field=value, ...).

        Параметры:
            session: AsyncSession.
            *predicates: произвольные SQLAlchemy-условия
            (например, Model.capacity >= 4).
            many: True - вернуть список, False - вернуть первый или None.
            order_by, limit, offset: необязательные параметры выдачи.
            options: ORM-опции загрузки (selectinload и т.п.).
            for_update: заблокировать выбранные строки до конца транзакции.
            **filters: равенства по полям модели (field=value).

        Исключения:
            InvalidArgumentError - если передан фильтр по несуществующему
            полю модели.
        """
        self._validate_filters(filters)
        conditions = [getattr(self.model, k) == v for k, v in filters.items()]
        if predicates:
            conditions.extend(predicates)

        stmt = select(self.model).where(*conditions)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        if options:
            stmt = stmt.options(*options)
        if for_update and supports_row_locks(session):
            stmt = stmt.with_for_update()

        res = await session.execute(stmt)
        return list(res.scalars().all()) if many else res.scalars().first()

    async def get_multi(
        self,
        session: AsyncSession,
        order_by: Sequence[Any] = (),
    ) -> list[ModelT]:
        """Получение всех записей из таблицы."""
        return await self.get(session, many=True, order_by=order_by)

    async def create(
        self,
        obj_in: CreateSchemaT,
        session: AsyncSession,
        **extra_fields: Any,
    ) -> ModelT:
        """Создание записи в БД."""
        obj_in_data = obj_in.model_dump(exclude_unset=True)
        obj_in_data.update(extra_fields)

        db_obj = self.model(**obj_in_data)
        async with atomic(session):
            session.add(db_obj)
        await session.refresh(db_obj)
        return db_obj

    async def update_obj(
        self,
        db_obj: ModelT,
        obj_in: UpdateSchemaT,
        session: AsyncSession,
    ) -> ModelT:
        """Обновление записи в БД."""
        update_data = obj_in.model_dump(exclude_unset=True)

        async with atomic(session):
            for field, value in update_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)
            session.add(db_obj)
        await session.refresh(db_obj)
        return db_obj

    def _validate_filters(self, filters: dict[str, Any]) -> None:
        """Валидация фильтров, примененных к get()."""
        unknown = [k for k in filters if not hasattr(self.model, k)]
        if unknown:
            raise InvalidArgumentError(
                'Некорректные поля фильтра для '
                f'{self.model.__name__}: {unknown}',
            )
