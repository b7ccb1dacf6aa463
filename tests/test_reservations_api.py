import asyncio
from datetime import date
from uuid import UUID, uuid4

import pytest

from conftest import RESERVATION_DATE
from restaurant_booking.repositories.reservation import (
    reservation_repository,
)


async def create(client, payload):
    return await client.post('/reservations/', json=payload)


async def test_create_reservation(client, tables, reservation_payload):
    response = await create(
        client,
        reservation_payload(customer_email='jane@example.com'),
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body['status'] == 'confirmed'
    assert body['table_number'] == 2
    assert body['end_time'] == '21:00'
    assert body['reservation_date'] == RESERVATION_DATE.isoformat()


async def test_booking_scenario(client, reservation_payload):
    first = await create(client, reservation_payload())
    assert first.status_code == 201

    same_time = await create(client, reservation_payload())
    assert same_time.status_code == 409
    body = same_time.json()
    assert body['error'] == 'CONFLICT'
    assert body['details']['conflicting_reservation']['id'] == (
        first.json()['id']
    )
    assert body['details']['requested_time'] == '19:00'

    overlapping = await create(
        client,
        reservation_payload(reservation_time='20:00'),
    )
    assert overlapping.status_code == 409

    back_to_back = await create(
        client,
        reservation_payload(reservation_time='21:00', duration_hours=1),
    )
    assert back_to_back.status_code == 201
    assert back_to_back.json()['end_time'] == '22:00'


async def test_other_table_is_not_blocked(client, tables, reservation_payload):
    await create(client, reservation_payload())

    response = await create(
        client,
        reservation_payload(table_id=tables[2]['id']),
    )

    assert response.status_code == 201


async def test_cancelled_reservation_frees_table(client, reservation_payload):
    first = await create(client, reservation_payload())

    response = await client.delete(f'/reservations/{first.json()["id"]}')

    assert response.status_code == 200
    assert response.json() == {
        'message': 'Бронирование успешно отменено',
        'reservation_id': first.json()['id'],
    }
    again = await create(client, reservation_payload())
    assert again.status_code == 201


async def test_party_exceeds_capacity(client, reservation_payload):
    response = await create(client, reservation_payload(party_size=5))

    assert response.status_code == 400
    body = response.json()
    assert body['error'] == 'PARTY_SIZE_EXCEEDS_CAPACITY'
    assert body['details']['table_capacity'] == 4


@pytest.mark.parametrize(
    'reservation_time, duration, error',
    [
        ('09:00', 2, 'OUTSIDE_OPERATING_HOURS'),
        ('22:00', 1, 'OUTSIDE_OPERATING_HOURS'),
        ('21:00', 2, 'EXTENDS_PAST_CLOSING'),
        ('20:30', 2, 'EXTENDS_PAST_CLOSING'),
    ],
)
async def test_operating_hours(
    client,
    reservation_payload,
    reservation_time,
    duration,
    error,
):
    response = await create(
        client,
        reservation_payload(
            reservation_time=reservation_time,
            duration_hours=duration,
        ),
    )

    assert response.status_code == 400
    assert response.json()['error'] == error


async def test_last_possible_start(client, reservation_payload):
    response = await create(
        client,
        reservation_payload(reservation_time='20:00', duration_hours=2),
    )

    assert response.status_code == 201


async def test_missing_restaurant(client, reservation_payload):
    response = await create(
        client,
        reservation_payload(restaurant_id=str(uuid4())),
    )

    assert response.status_code == 404


async def test_missing_table(client, reservation_payload):
    response = await create(client, reservation_payload(table_id=str(uuid4())))

    assert response.status_code == 404


async def test_inactive_table(client, restaurant, tables, reservation_payload):
    await client.patch(
        f'/restaurants/{restaurant["id"]}/tables/{tables[1]["id"]}',
        json={'is_active': False},
    )

    response = await create(client, reservation_payload())

    assert response.status_code == 400
    assert response.json()['error'] == 'TABLE_INACTIVE'


@pytest.mark.parametrize(
    'overrides',
    [
        {'reservation_time': '7pm'},
        {'party_size': 0},
        {'duration_hours': 0},
        {'duration_hours': 5},
        {'customer_phone': 'call me'},
        {'customer_email': 'not-an-email'},
        {'customer_name': '   '},
    ],
)
async def test_create_validation(client, reservation_payload, overrides):
    response = await create(client, reservation_payload(**overrides))

    assert response.status_code == 422
    assert response.json()['error'] == 'VALIDATION_ERROR'


async def test_concurrent_bookings_of_same_table(client, reservation_payload):
    responses = await asyncio.gather(
        create(client, reservation_payload()),
        create(client, reservation_payload(reservation_time='20:00')),
    )

    assert sorted(response.status_code for response in responses) == [
        201,
        409,
    ]
    assert reservation_repository._table_locks == {}


async def test_table_lock_is_released_after_booking(
    client,
    tables,
    reservation_payload,
):
    for number, table in enumerate(tables[1:], start=1):
        response = await create(
            client,
            reservation_payload(
                table_id=table['id'],
                reservation_time=f'{10 + number}:00',
            ),
        )
        assert response.status_code == 201

    assert reservation_repository._table_locks == {}
    assert not reservation_repository._lock_holders


async def test_get_reservation(client, reservation_payload):
    created = await create(client, reservation_payload())

    response = await client.get(f'/reservations/{created.json()["id"]}')

    assert response.status_code == 200
    assert response.json()['table_number'] == 2
    assert response.json()['end_time'] == '21:00'


async def test_get_missing_reservation(client):
    response = await client.get(f'/reservations/{uuid4()}')

    assert response.status_code == 404
    assert response.json()['error'] == 'NOT_FOUND'


async def test_update_into_own_interval(client, reservation_payload):
    created = await create(client, reservation_payload())

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'reservation_time': '19:30'},
    )

    assert response.status_code == 200
    assert response.json()['end_time'] == '21:30'


async def test_update_into_busy_interval(client, reservation_payload):
    await create(client, reservation_payload())
    morning = await create(
        client,
        reservation_payload(reservation_time='12:00'),
    )

    response = await client.patch(
        f'/reservations/{morning.json()["id"]}',
        json={'reservation_time': '18:00'},
    )

    assert response.status_code == 409
    unchanged = await client.get(f'/reservations/{morning.json()["id"]}')
    assert unchanged.json()['reservation_time'] == '12:00'


async def test_update_past_closing(client, reservation_payload):
    created = await create(client, reservation_payload())

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'duration_hours': 4},
    )

    assert response.status_code == 400
    assert response.json()['error'] == 'EXTENDS_PAST_CLOSING'


async def test_update_party_size_over_capacity(client, reservation_payload):
    created = await create(client, reservation_payload(party_size=2))

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'party_size': 6},
    )

    assert response.status_code == 400
    assert response.json()['error'] == 'PARTY_SIZE_EXCEEDS_CAPACITY'


async def test_update_sends_notification(
    client,
    reservation_payload,
    task_queue,
):
    created = await create(client, reservation_payload())
    task_queue['sms'].apply_async.reset_mock()

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'customer_name': 'John Doe', 'party_size': 3},
    )

    assert response.status_code == 200
    assert response.json()['customer_name'] == 'John Doe'
    args, _ = task_queue['sms'].apply_async.call_args
    phone, text = args[0]
    assert phone == '+1234567890'
    assert 'Количество гостей изменено на 3' in text


async def test_update_without_changes_is_silent(
    client,
    reservation_payload,
    task_queue,
):
    created = await create(client, reservation_payload())
    task_queue['sms'].apply_async.reset_mock()

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'party_size': 4},
    )

    assert response.status_code == 200
    task_queue['sms'].apply_async.assert_not_called()


async def test_update_cancelled_reservation(client, reservation_payload):
    created = await create(client, reservation_payload())
    await client.delete(f'/reservations/{created.json()["id"]}')

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'party_size': 2},
    )

    assert response.status_code == 400
    assert response.json()['error'] == 'RESERVATION_CANCELLED'


async def test_cancel_twice(client, reservation_payload):
    created = await create(client, reservation_payload())
    await client.delete(f'/reservations/{created.json()["id"]}')

    response = await client.delete(f'/reservations/{created.json()["id"]}')

    assert response.status_code == 400
    assert response.json()['error'] == 'ALREADY_CANCELLED'


async def test_cancel_missing_reservation(client):
    response = await client.delete(f'/reservations/{uuid4()}')

    assert response.status_code == 404


async def test_update_cannot_cancel(client, reservation_payload):
    created = await create(client, reservation_payload())

    response = await client.patch(
        f'/reservations/{created.json()["id"]}',
        json={'status': 'cancelled'},
    )

    assert response.status_code == 422
    assert response.json()['error'] == 'VALIDATION_ERROR'
    current = await client.get(f'/reservations/{created.json()["id"]}')
    assert current.json()['status'] == 'confirmed'


async def test_failed_cancel_is_rolled_back(
    client,
    session_factory,
    reservation_payload,
    monkeypatch,
):
    created = await create(client, reservation_payload())
    reservation_id = created.json()['id']

    async def broken_commit():
        raise RuntimeError('database is gone')

    async with session_factory() as session:
        reservation = await reservation_repository.get_or_raise(
            session,
            UUID(reservation_id),
        )
        monkeypatch.setattr(session, 'commit', broken_commit)

        with pytest.raises(RuntimeError):
            await reservation_repository.cancel(session, reservation)

    current = await client.get(f'/reservations/{reservation_id}')
    assert current.json()['status'] == 'confirmed'
    assert reservation_repository._table_locks == {}


async def test_confirmation_sent_by_sms_and_email(
    client,
    reservation_payload,
    task_queue,
):
    await create(client, reservation_payload(customer_email='jane@example.com'))

    task_queue['sms'].apply_async.assert_called_once()
    task_queue['email'].apply_async.assert_called_once()
    args, kwargs = task_queue['email'].apply_async.call_args
    assert args[0][0] == ['jane@example.com']
    assert kwargs['queue'] == 'default'


async def test_confirmation_without_email(
    client,
    reservation_payload,
    task_queue,
):
    await create(client, reservation_payload())

    task_queue['sms'].apply_async.assert_called_once()
    task_queue['email'].apply_async.assert_not_called()


async def test_notification_failure_does_not_fail_booking(
    client,
    reservation_payload,
    task_queue,
):
    task_queue['sms'].apply_async.side_effect = ConnectionError('broker down')

    response = await create(client, reservation_payload())

    assert response.status_code == 201


async def test_schedule_reminder(client, reservation_payload, task_queue):
    created = await create(client, reservation_payload())
    task_queue['sms'].apply_async.reset_mock()

    response = await client.post(
        f'/reservations/{created.json()["id"]}/reminder',
        params={'reminder_minutes': 30},
    )

    assert response.status_code == 200
    assert response.json()['status'] == 'success'
    _, kwargs = task_queue['sms'].apply_async.call_args
    assert kwargs['eta'].isoformat() == f'{RESERVATION_DATE}T18:30:00'


async def test_reminder_in_past(client, reservation_payload):
    created = await create(
        client,
        reservation_payload(reservation_date=date(2020, 1, 1).isoformat()),
    )

    response = await client.post(
        f'/reservations/{created.json()["id"]}/reminder',
    )

    assert response.status_code == 400
    assert response.json()['error'] == 'REMINDER_IN_PAST'


async def test_reminder_for_cancelled(client, reservation_payload):
    created = await create(client, reservation_payload())
    await client.delete(f'/reservations/{created.json()["id"]}')

    response = await client.post(
        f'/reservations/{created.json()["id"]}/reminder',
    )

    assert response.status_code == 400
    assert response.json()['error'] == 'RESERVATION_CANCELLED'
