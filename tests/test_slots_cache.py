from datetime import date
from uuid import uuid4

import pytest

from conftest import RESERVATION_DATE
from restaurant_booking.services.cache_service import cache_service

OTHER_DATE = date(2030, 6, 16)


async def get_slots(client, restaurant, reservation_date=RESERVATION_DATE):
    response = await client.get(
        f'/restaurants/{restaurant["id"]}/available-slots',
        params={'date': reservation_date.isoformat(), 'party_size': 4},
    )
    assert response.status_code == 200, response.text
    return {
        slot['time']: slot['available_tables']
        for slot in response.json()['available_slots']
    }


def cached_keys(fake_redis, restaurant, reservation_date=None):
    pattern = f'slots:{restaurant["id"]}:'
    pattern += f'{reservation_date}:*' if reservation_date else '*'
    return fake_redis.keys_like(pattern)


async def test_listing_is_cached(client, restaurant, tables, fake_redis):
    first = await get_slots(client, restaurant)
    second = await get_slots(client, restaurant)

    assert first == second
    assert len(cached_keys(fake_redis, restaurant, RESERVATION_DATE)) == 1


async def test_create_resets_cached_listing(
    client,
    restaurant,
    reservation_payload,
    fake_redis,
):
    assert (await get_slots(client, restaurant))['19:00'] == 2

    response = await client.post('/reservations/', json=reservation_payload())
    assert response.status_code == 201

    assert cached_keys(fake_redis, restaurant, RESERVATION_DATE) == []
    assert (await get_slots(client, restaurant))['19:00'] == 1


async def test_cancel_resets_cached_listing(
    client,
    restaurant,
    reservation_payload,
    fake_redis,
):
    created = await client.post('/reservations/', json=reservation_payload())
    assert (await get_slots(client, restaurant))['19:00'] == 1

    response = await client.delete(f'/reservations/{created.json()["id"]}')
    assert response.status_code == 200

    assert cached_keys(fake_redis, restaurant, RESERVATION_DATE) == []
    assert (await get_slots(client, restaurant))['19:00'] == 2


async def test_date_move_resets_both_dates(
    client,
    restaurant,
    reservation_payload,
    fake_redis,
):
    created = await client.post('/reservations/', json=reservation_payload())
    assert (await get_slots(client, restaurant))['19:00'] == 1
    assert (await get_slots(client, restaurant, OTHER_DATE))['19:00'] == 2

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'reservation_date': OTHER_DATE.isoformat()},
    )
    assert response.status_code == 200, response.text

    assert cached_keys(fake_redis, restaurant) == []
    assert (await get_slots(client, restaurant))['19:00'] == 2
    assert (await get_slots(client, restaurant, OTHER_DATE))['19:00'] == 1


async def test_table_update_resets_every_date(
    client,
    restaurant,
    tables,
    fake_redis,
):
    assert (await get_slots(client, restaurant))['19:00'] == 2
    assert (await get_slots(client, restaurant, OTHER_DATE))['19:00'] == 2

    response = await client.patch(
        f'/restaurants/{restaurant["id"]}/tables/{tables[2]["id"]}',
        json={'is_active': False},
    )
    assert response.status_code == 200

    assert cached_keys(fake_redis, restaurant) == []
    assert (await get_slots(client, restaurant))['19:00'] == 1
    assert (await get_slots(client, restaurant, OTHER_DATE))['19:00'] == 1


async def test_listing_computed_before_write_is_not_served(fake_redis):
    restaurant_id = uuid4()
    generation = await cache_service.slots_generation(
        restaurant_id,
        RESERVATION_DATE,
    )
    stale_key = cache_service.slots_key(
        restaurant_id,
        RESERVATION_DATE,
        generation,
        4,
        2,
        30,
    )

    await cache_service.invalidate_slots(restaurant_id, RESERVATION_DATE)
    # A request that started before the write stores its result late.
    await cache_service.set(stale_key, {'available_slots': []})

    fresh_generation = await cache_service.slots_generation(
        restaurant_id,
        RESERVATION_DATE,
    )
    fresh_key = cache_service.slots_key(
        restaurant_id,
        RESERVATION_DATE,
        fresh_generation,
        4,
        2,
        30,
    )
    assert fresh_key != stale_key
    assert await cache_service.get(fresh_key) is None


async def test_restaurant_reset_changes_generation_of_every_date(fake_redis):
    restaurant_id = uuid4()
    before = [
        await cache_service.slots_generation(restaurant_id, day)
        for day in (RESERVATION_DATE, OTHER_DATE)
    ]

    await cache_service.invalidate_restaurant_slots(restaurant_id)

    after = [
        await cache_service.slots_generation(restaurant_id, day)
        for day in (RESERVATION_DATE, OTHER_DATE)
    ]
    assert before == ['0.0', '0.0']
    assert after == ['1.0', '1.0']


async def test_generation_keys_survive_reset(fake_redis):
    restaurant_id = uuid4()

    await cache_service.invalidate_slots(restaurant_id, RESERVATION_DATE)
    await cache_service.invalidate_restaurant_slots(restaurant_id)

    assert await cache_service.slots_generation(
        restaurant_id,
        RESERVATION_DATE,
    ) == '1.1'


async def test_failed_reset_disables_cache(monkeypatch, fake_redis):
    async def broken_incr(key):
        raise ConnectionError('redis is gone')

    monkeypatch.setattr(fake_redis, 'incr', broken_incr)
    restaurant_id = uuid4()

    await cache_service.invalidate_slots(restaurant_id, RESERVATION_DATE)

    assert cache_service.redis is None
    assert await cache_service.slots_generation(
        restaurant_id,
        RESERVATION_DATE,
    ) is None
    assert await cache_service.get('slots:anything') is None


async def test_listing_bypasses_cache_after_failed_reset(
    client,
    restaurant,
    reservation_payload,
    fake_redis,
    monkeypatch,
):
    assert (await get_slots(client, restaurant))['19:00'] == 2

    async def broken_incr(key):
        raise ConnectionError('redis is gone')

    monkeypatch.setattr(fake_redis, 'incr', broken_incr)
    response = await client.post('/reservations/', json=reservation_payload())
    assert response.status_code == 201

    # The old listing is still in Redis but nobody reads it.
    assert cached_keys(fake_redis, restaurant, RESERVATION_DATE)
    assert (await get_slots(client, restaurant))['19:00'] == 1


@pytest.mark.parametrize('failing', ['mget', 'get'])
async def test_read_errors_fall_back_to_database(
    client,
    restaurant,
    tables,
    fake_redis,
    monkeypatch,
    failing,
):
    async def broken(*args, **kwargs):
        raise ConnectionError('redis is gone')

    monkeypatch.setattr(fake_redis, failing, broken)

    assert (await get_slots(client, restaurant))['19:00'] == 2
