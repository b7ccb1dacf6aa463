from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_booking.models import Table
from restaurant_booking.repositories.base import CRUDBase
from restaurant_booking.repositories.restaurant import restaurant_repository
from restaurant_booking.schemas.table import TableCreate, TableUpdate
from restaurant_booking.utils.exceptions import ConflictError, NotFoundError


class TableRepository(CRUDBase[Table, TableCreate, TableUpdate]):
    """Репозиторий для операций со столами."""

    def __init__(self) -> None:
        """Инициализация репозитория столов."""
        super().__init__(Table)

    async def get_for_restaurant(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        table_id: UUID,
        for_update: bool = False,
    ) -> Table:
        """Возвращает стол ресторана или выбрасывает NotFoundError."""
        table = await self.get(
            session,
            id=table_id,
            restaurant_id=restaurant_id,
            for_update=for_update,
        )
        if table is None:
            raise NotFoundError('Стол не найден', table_id)
        return table

    async def get_multi_by_restaurant(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        *,
        show_all: bool = True,
    ) -> List[Table]:
        """Получает столы ресторана, упорядоченные по номеру."""
        conditions = [Table.restaurant_id == restaurant_id]
        if not show_all:
            conditions.append(Table.is_active.is_(True))
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(Table.table_number,),
        )

    async def get_active_by_restaurant(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        min_capacity: Optional[int] = None,
    ) -> List[Table]:
        """Активные столы ресторана вместимостью не меньше min_capacity."""
        conditions = [
            Table.restaurant_id == restaurant_id,
            Table.is_active.is_(True),
        ]
        if min_capacity is not None:
            conditions.append(Table.capacity >= min_capacity)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(Table.table_number,),
        )

    async def create_for_restaurant(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        obj_in: TableCreate,
    ) -> Table:
        """Создает стол ресторана с проверкой уникальности номера."""
        await restaurant_repository.get_or_raise(session, restaurant_id)
        await self._ensure_unique_number(
            session,
            restaurant_id,
            obj_in.table_number,
        )
        return await self.create(obj_in, session, restaurant_id=restaurant_id)

    async def _ensure_unique_number(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
        table_number: int,
    ) -> None:
        """Проверяет, что номер стола ещё не занят в ресторане."""
        stmt = select(Table.id).where(
            Table.restaurant_id == restaurant_id,
            Table.table_number == table_number,
        )
        result = await session.execute(stmt)
        if result.scalars().first():
            raise ConflictError(
                'Стол с таким номером уже есть в ресторане',
                code='DUPLICATE_TABLE_NUMBER',
                details={'table_number': table_number},
            )


table_repository = TableRepository()
