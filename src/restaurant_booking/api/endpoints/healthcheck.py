from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter
from loguru import logger
from sqlalchemy import text

from restaurant_booking.core.config import settings
from restaurant_booking.core.db import DbSession
from restaurant_booking.core.dependencies import CacheServiceDep
from restaurant_booking.services.cache_service import CacheService

router = APIRouter(prefix='/healthcheck', tags=['Healthcheck'])
health_router = APIRouter(tags=['Healthcheck'])


@health_router.get('/health')
async def health() -> Dict[str, str]:
    """Проверка, что приложение запущено."""
    return {
        'status': 'ok',
        'version': settings.API_VERSION,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }


@router.get('/db')
async def db_health(session: DbSession) -> Dict[str, str]:
    """Проверка состояния БД."""
    try:
        result = await session.execute(text('SELECT 1'))
        _ = result.scalar()
        logger.debug('Проверка БД: успешно')
        return {'status': 'ok'}
    except Exception as e:
        logger.error(f'Ошибка проверки БД: {str(e)}')
        return {'status': 'error', 'details': str(e)}


@router.get('/redis')
async def redis_health(
    cache: CacheService = CacheServiceDep,
) -> Dict[str, str]:
    """Проверка состояния Redis, используемого для кеша слотов."""
    try:
        if cache.redis:
            await cache.redis.ping()
            logger.debug('Проверка Redis: успешно')
            return {'status': 'ok'}
        logger.warning('Redis не подключен, кеш слотов отключен')
        return {'status': 'error', 'details': 'Redis не подключен'}
    except Exception as e:
        logger.error(f'Ошибка проверки Redis: {str(e)}')
        return {'status': 'error', 'details': str(e)}
