from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_booking.models import Restaurant
from restaurant_booking.repositories.base import CRUDBase
from restaurant_booking.schemas.restaurant import RestaurantCreate
from restaurant_booking.utils.exceptions import NotFoundError


class RestaurantRepository(
    CRUDBase[Restaurant, RestaurantCreate, RestaurantCreate],
):
    """Репозиторий для операций с ресторанами."""

    def __init__(self) -> None:
        """Инициализация репозитория ресторанов."""
        super().__init__(Restaurant)

    async def get_multi_ordered(
        self,
        session: AsyncSession,
    ) -> List[Restaurant]:
        """Получает список ресторанов, упорядоченный по названию."""
        return await self.get_multi(
            session,
            order_by=(Restaurant.name, Restaurant.created_at),
        )

    async def get_or_raise(
        self,
        session: AsyncSession,
        restaurant_id: UUID,
    ) -> Restaurant:
        """Возвращает ресторан или выбрасывает NotFoundError."""
        restaurant = await self.get(session, id=restaurant_id)
        if restaurant is None:
            raise NotFoundError('Ресторан не найден', restaurant_id)
        return restaurant


restaurant_repository = RestaurantRepository()
