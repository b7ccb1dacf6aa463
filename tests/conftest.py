"""Test configuration and fixtures"""

import fnmatch
import os
import tempfile
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from unittest.mock import MagicMock
from uuid import UUID, uuid4

os.environ.setdefault(
    'DATABASE_URL',
    'sqlite+aiosqlite:///'
    + os.path.join(tempfile.gettempdir(), 'restaurant_booking_import.db'),
)

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    async_sessionmaker,
    create_async_engine,
)

from restaurant_booking.core.db import Base, get_async_session  # noqa: E402
from restaurant_booking.main import app  # noqa: E402
from restaurant_booking.services import notification  # noqa: E402
from restaurant_booking.services.cache_service import (  # noqa: E402
    cache_service,
)
from restaurant_booking.utils.enums import ReservationStatus  # noqa: E402

RESERVATION_DATE = date(2030, 6, 15)


@dataclass
class FakeTable:
    table_number: int
    capacity: int
    restaurant_id: UUID
    id: UUID = field(default_factory=uuid4)
    is_active: bool = True


@dataclass
class FakeReservation:
    table_id: UUID
    reservation_date: date
    reservation_time: str
    duration_hours: float
    status: ReservationStatus = ReservationStatus.CONFIRMED
    id: UUID = field(default_factory=uuid4)


class FakeStorage:
    """In-memory storage with the same contract as the database one."""

    def __init__(self) -> None:
        self.restaurant_id = uuid4()
        self.tables: list[FakeTable] = []
        self.reservations: list[FakeReservation] = []
        self.reservation_lookups = 0

    def add_table(self, table_number: int, capacity: int) -> FakeTable:
        table = FakeTable(table_number, capacity, self.restaurant_id)
        self.tables.append(table)
        return table

    def book(
        self,
        table: FakeTable,
        reservation_time: str,
        duration_hours: float = 2,
        reservation_date: date = RESERVATION_DATE,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
    ) -> FakeReservation:
        reservation = FakeReservation(
            table.id,
            reservation_date,
            reservation_time,
            duration_hours,
            status,
        )
        self.reservations.append(reservation)
        return reservation

    async def fetch_active_reservations(
        self,
        table_id: UUID,
        reservation_date: date,
    ) -> list[FakeReservation]:
        self.reservation_lookups += 1
        return [
            reservation
            for reservation in self.reservations
            if reservation.table_id == table_id
            and reservation.reservation_date == reservation_date
            and reservation.status in ReservationStatus.active()
        ]

    async def fetch_tables(
        self,
        restaurant_id: UUID,
        min_capacity: Optional[int] = None,
    ) -> list[FakeTable]:
        return sorted(
            (
                table
                for table in self.tables
                if table.restaurant_id == restaurant_id
                and table.is_active
                and (min_capacity is None or table.capacity >= min_capacity)
            ),
            key=lambda table: table.table_number,
        )


class FakeRedis:
    """Dict-backed stand-in for the redis.asyncio commands the cache uses."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def ping(self):
        return True

    async def close(self):
        return None

    async def get(self, key):
        return self.data.get(key)

    async def mget(self, keys):
        return [self.data.get(key) for key in keys]

    async def setex(self, key, ttl, value):
        self.data[key] = value
        return True

    async def incr(self, key):
        value = int(self.data.get(key, 0)) + 1
        self.data[key] = str(value)
        return value

    async def delete(self, *keys):
        return sum(self.data.pop(key, None) is not None for key in keys)

    async def scan_iter(self, match='*'):
        for key in list(self.data):
            if fnmatch.fnmatchcase(key, match):
                yield key

    def keys_like(self, pattern):
        return sorted(
            key for key in self.data if fnmatch.fnmatchcase(key, pattern)
        )


@pytest.fixture
def storage():
    """Empty in-memory storage"""
    return FakeStorage()


@pytest.fixture(autouse=True)
def task_queue(monkeypatch):
    """Replace Celery tasks so nothing goes to the broker"""
    email_task = MagicMock()
    sms_task = MagicMock()
    monkeypatch.setattr(notification, 'send_email_task', email_task)
    monkeypatch.setattr(notification, 'send_sms_task', sms_task)
    return {'email': email_task, 'sms': sms_task}


@pytest.fixture
async def session_factory(tmp_path):
    """Create test database in a temp file"""
    engine = create_async_engine(
        f'sqlite+aiosqlite:///{tmp_path / "test.db"}',
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def client(session_factory):
    """Create test client with overridden database"""

    async def override_get_async_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url='http://test',
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def restaurant(client):
    """Restaurant open 10:00-22:00"""
    response = await client.post(
        '/restaurants/',
        json={
            'name': 'Test Bistro',
            'opening_time': '10:00',
            'closing_time': '22:00',
            'total_tables': 3,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def tables(client, restaurant):
    """Tables 1, 2 and 3 with capacities 2, 4 and 6"""
    created = []
    for number, capacity in ((1, 2), (2, 4), (3, 6)):
        response = await client.post(
            f'/restaurants/{restaurant["id"]}/tables/',
            json={'table_number': number, 'capacity': capacity},
        )
        assert response.status_code == 201, response.text
        created.append(response.json())
    return created


@pytest.fixture
def reservation_payload(restaurant, tables):
    """Factory for reservation request bodies"""

    def build(**overrides):
        payload = {
            'restaurant_id': restaurant['id'],
            'table_id': tables[1]['id'],
            'customer_name': 'Jane Doe',
            'customer_phone': '+1234567890',
            'party_size': 4,
            'reservation_date': RESERVATION_DATE.isoformat(),
            'reservation_time': '19:00',
            'duration_hours': 2,
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def fake_redis(monkeypatch):
    """Plug an in-memory Redis into the shared cache service"""
    redis = FakeRedis()
    monkeypatch.setattr(cache_service, 'redis', redis)
    return redis
