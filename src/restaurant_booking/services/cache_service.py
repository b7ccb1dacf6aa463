import json
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from loguru import logger
from redis.asyncio import Redis

from restaurant_booking.core.config import settings
from restaurant_booking.core.constants import (
    SLOTS_CACHE_PREFIX,
    SLOTS_GENERATION_PREFIX,
)


class CacheService:
    """Сервис для работы с кешем Redis.

    Кешируются только производные данные (свободные слоты). Источником
    истины остаются бронирования в базе. Ключ слотов содержит поколение
    ресторана и даты: любая запись увеличивает счётчик поколения, и
    выборка, посчитанная до записи, сохраняется под устаревшим ключом,
    который больше никто не читает. Если увеличить счётчик не удалось,
    кеш отключается целиком.
    """

    def __init__(self) -> None:
        self.redis: Optional[Redis] = None
        self.ttl = settings.REDIS_CACHE_TTL

    async def connect(self) -> None:
        """Установка подключения к Redis."""
        try:
            self.redis = Redis.from_url(
                settings.redis_url,
                encoding='utf-8',
                decode_responses=True,
            )
            await self.redis.ping()
            logger.info('Успешное подключение к Redis')
        except Exception as e:
            logger.error(f'Ошибка подключения к Redis: {str(e)}')
            self.redis = None

    async def disconnect(self) -> None:
        """Закрытие подключения к Redis."""
        if self.redis:
            await self.redis.close()
            self.redis = None
            logger.info('Отключение от Redis')

    async def get(self, key: str) -> Optional[Any]:
        """Получение значения по ключу."""
        if not self.redis:
            return None
        try:
            start_time = datetime.now()
            data = await self.redis.get(key)
            request_time = (datetime.now() - start_time).total_seconds() * 1000
            if data:
                logger.debug(
                    f'Кеш попадание: {key} | '
                    f'размер: {len(data)} байт | '
                    f'время: {request_time:.2f}мс',
                )
                return json.loads(data)
            logger.debug(f'Кеш промах: {key} | время: {request_time:.2f}мс')
            return None
        except Exception as e:
            logger.error(f'Ошибка получения из кеша {key}: {str(e)}')
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
    ) -> bool:
        """Сохранение значения в кеш."""
        if not self.redis:
            return False
        try:
            serialized_value = json.dumps(value, default=str)
            expire_time = ttl or self.ttl
            await self.redis.setex(key, expire_time, serialized_value)
            return True
        except Exception as e:
            logger.error(f'Ошибка сохранения в кеш {key}: {str(e)}')
            return False

    async def delete_pattern(self, pattern: str) -> bool:
        """Удаление ключей по шаблону."""
        if not self.redis:
            return False
        try:
            keys = []
            async for key in self.redis.scan_iter(match=pattern):
                keys.append(key)
            if keys:
                await self.redis.delete(*keys)
                logger.info(
                    f'Удалено ключей по шаблону {pattern}: {len(keys)}',
                )
            return True
        except Exception as e:
            logger.error(f'Ошибка удаления по шаблону: {str(e)}')
            return False

    @staticmethod
    def _generation_keys(
        restaurant_id: UUID,
        reservation_date: date,
    ) -> tuple[str, str]:
        return (
            f'{SLOTS_GENERATION_PREFIX}:{restaurant_id}',
            f'{SLOTS_GENERATION_PREFIX}:{restaurant_id}:{reservation_date}',
        )

    async def slots_generation(
        self,
        restaurant_id: UUID,
        reservation_date: date,
    ) -> Optional[str]:
        """Текущее поколение слотов ресторана на дату.

        Складывается из счётчика ресторана (меняется при правке столов)
        и счётчика даты (меняется при правке бронирований). Читать его
        нужно до расчёта слотов. None означает, что кеш недоступен и
        его нужно обойти.
        """
        if not self.redis:
            return None
        try:
            values = await self.redis.mget(
                list(self._generation_keys(restaurant_id, reservation_date)),
            )
        except Exception as e:
            logger.error(f'Ошибка чтения поколения слотов: {str(e)}')
            return None
        return '.'.join(value or '0' for value in values)

    @staticmethod
    def slots_key(
        restaurant_id: UUID,
        reservation_date: date,
        generation: str,
        party_size: int,
        duration_hours: float,
        granularity_minutes: int,
    ) -> str:
        """Ключ кеша свободных слотов ресторана на дату."""
        return (
            f'{SLOTS_CACHE_PREFIX}:{restaurant_id}:{reservation_date}:'
            f'g{generation}:{party_size}:{duration_hours}:'
            f'{granularity_minutes}'
        )

    async def _bump_generation(self, key: str) -> bool:
        if not self.redis:
            return False
        try:
            await self.redis.incr(key)
            return True
        except Exception as e:
            logger.error(
                f'Не удалось сбросить кеш слотов ({key}): {str(e)}. '
                'Кеш отключен',
            )
            self.redis = None
            return False

    async def invalidate_slots(
        self,
        restaurant_id: UUID,
        reservation_date: date,
    ) -> None:
        """Сброс кеша слотов ресторана на конкретную дату."""
        _, date_key = self._generation_keys(restaurant_id, reservation_date)
        if await self._bump_generation(date_key):
            await self.delete_pattern(
                f'{SLOTS_CACHE_PREFIX}:{restaurant_id}:{reservation_date}:*',
            )

    async def invalidate_restaurant_slots(self, restaurant_id: UUID) -> None:
        """Сброс кеша слотов ресторана на все даты."""
        if await self._bump_generation(
            f'{SLOTS_GENERATION_PREFIX}:{restaurant_id}',
        ):
            await self.delete_pattern(
                f'{SLOTS_CACHE_PREFIX}:{restaurant_id}:*',
            )


cache_service = CacheService()
