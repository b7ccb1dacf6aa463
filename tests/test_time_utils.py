import math
from datetime import date

import pytest

from restaurant_booking.utils.exceptions import (
    InvalidArgumentError,
    InvalidFormatError,
)
from restaurant_booking.utils.time_utils import (
    add_duration,
    generate_time_slots,
    hours_to_minutes,
    is_valid_date,
    is_valid_time,
    is_within,
    overlaps,
    parse_date,
    to_minutes,
    to_time,
)


@pytest.mark.parametrize(
    'value, expected',
    [('00:00', 0), ('09:30', 570), ('14:00', 840), ('23:59', 1439)],
)
def test_to_minutes(value, expected):
    assert to_minutes(value) == expected
    assert to_time(expected) == value


@pytest.mark.parametrize('value', ['24:00', '9:30', '12:60', '1200', '', None])
def test_to_minutes_rejects_bad_format(value):
    with pytest.raises(InvalidFormatError):
        to_minutes(value)


def test_to_time_does_not_wrap_past_midnight():
    assert to_time(1500) == '25:00'


def test_add_duration_with_fractional_hours():
    assert add_duration('14:00', 2) == '16:00'
    assert add_duration('19:00', 1.5) == '20:30'
    assert add_duration('11:45', 0.5) == '12:15'


@pytest.mark.parametrize('hours', [0, -1, '2', True, math.nan, math.inf])
def test_hours_to_minutes_rejects_bad_hours(hours):
    with pytest.raises(InvalidArgumentError):
        hours_to_minutes(hours)


def test_overlaps_is_symmetric():
    assert overlaps('14:00', '16:00', '15:00', '17:00')
    assert overlaps('15:00', '17:00', '14:00', '16:00')
    assert not overlaps('10:00', '11:00', '12:00', '13:00')
    assert not overlaps('12:00', '13:00', '10:00', '11:00')


def test_back_to_back_intervals_do_not_overlap():
    assert not overlaps('14:00', '16:00', '16:00', '18:00')
    assert not overlaps('16:00', '18:00', '14:00', '16:00')


def test_interval_contained_in_another_overlaps():
    assert overlaps('12:00', '20:00', '14:00', '15:00')


def test_is_within_excludes_closing_time():
    assert is_within('10:00', '10:00', '22:00')
    assert is_within('21:59', '10:00', '22:00')
    assert not is_within('22:00', '10:00', '22:00')
    assert not is_within('09:59', '10:00', '22:00')


def test_generate_time_slots():
    assert generate_time_slots('10:00', '12:00', 30) == [
        '10:00',
        '10:30',
        '11:00',
        '11:30',
    ]
    assert generate_time_slots('10:00', '12:00', 60) == ['10:00', '11:00']


def test_generate_time_slots_rejects_zero_step():
    with pytest.raises(InvalidArgumentError):
        generate_time_slots('10:00', '12:00', 0)


def test_parse_date():
    assert parse_date('2030-06-15') == date(2030, 6, 15)
    assert parse_date(date(2030, 6, 15)) == date(2030, 6, 15)
    with pytest.raises(InvalidFormatError):
        parse_date('2030-02-30')
    with pytest.raises(InvalidFormatError):
        parse_date('15.06.2030')


def test_validators():
    assert is_valid_time('07:05')
    assert not is_valid_time('7:05')
    assert is_valid_date('2024-02-29')
    assert not is_valid_date('2023-02-29')
