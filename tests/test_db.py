from uuid import uuid4

import pytest
from sqlalchemy import make_url

from restaurant_booking.core.config import settings
from restaurant_booking.core.db import (
    atomic,
    engine_options,
    supports_row_locks,
)
from restaurant_booking.models import Restaurant


def build_restaurant(restaurant_id):
    return Restaurant(
        id=restaurant_id,
        name='Corner',
        opening_time='09:00',
        closing_time='18:00',
        total_tables=2,
    )


def test_sqlite_engine_has_no_pool_options():
    options = engine_options(make_url('sqlite+aiosqlite:///booking.db'))

    assert options == {'echo': settings.DB_ECHO}


def test_postgres_engine_checks_connections():
    options = engine_options(
        make_url('postgresql+asyncpg://user:secret@db:5432/booking'),
    )

    assert options['pool_pre_ping'] is True
    assert options['pool_size'] == settings.DB_POOL_SIZE
    assert options['max_overflow'] == settings.DB_MAX_OVERFLOW


async def test_sqlite_session_skips_row_locks(session_factory):
    async with session_factory() as session:
        assert not supports_row_locks(session)


async def test_atomic_commits(session_factory):
    restaurant_id = uuid4()
    async with session_factory() as session:
        async with atomic(session):
            session.add(build_restaurant(restaurant_id))

    async with session_factory() as session:
        assert await session.get(Restaurant, restaurant_id) is not None


async def test_atomic_rolls_back_on_error(session_factory):
    restaurant_id = uuid4()
    async with session_factory() as session:
        with pytest.raises(RuntimeError):
            async with atomic(session):
                session.add(build_restaurant(restaurant_id))
                await session.flush()
                raise RuntimeError('validation failed')

    async with session_factory() as session:
        assert await session.get(Restaurant, restaurant_id) is None
