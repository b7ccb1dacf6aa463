"""Арифметика времени в формате HH:mm.

Все значения времени - локальное время ресторана без часовых поясов.
Интервалы полуоткрытые: [начало, конец), поэтому бронирование,
заканчивающееся в 16:00, не пересекается с бронированием, начинающимся
в 16:00.
"""

import math
import re
from datetime import date, datetime
from typing import Union

from restaurant_booking.core.constants import (
    DATE_FORMAT,
    DATE_PATTERN,
    DEFAULT_SLOT_GRANULARITY_MINUTES,
    MINUTES_IN_HOUR,
    TIME_PATTERN,
)
from restaurant_booking.utils.exceptions import (
    InvalidArgumentError,
    InvalidFormatError,
)

TimeValue = Union[str, int]
DateValue = Union[str, date]


def is_valid_time(value: object) -> bool:
    """Проверяет, что значение является временем в формате HH:mm."""
    return isinstance(value, str) and bool(re.fullmatch(TIME_PATTERN, value))


def is_valid_date(value: object) -> bool:
    """Проверяет, что значение является существующей датой YYYY-MM-DD."""
    if not isinstance(value, str) or not re.fullmatch(DATE_PATTERN, value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def to_minutes(value: TimeValue) -> int:
    """Переводит время HH:mm в количество минут с полуночи.

    Целое число считается уже переведённым в минуты и возвращается как есть.

    Raises:
        InvalidFormatError: если строка не соответствует формату HH:mm

    """
    if isinstance(value, bool):
        raise InvalidFormatError(
            f'Некорректное время: {value!r}, ожидается формат HH:mm',
        )
    if isinstance(value, int):
        if value < 0:
            raise InvalidArgumentError(
                f'Количество минут не может быть отрицательным: {value}',
            )
        return value
    if not is_valid_time(value):
        raise InvalidFormatError(
            f'Некорректное время: {value!r}, ожидается формат HH:mm',
        )
    hours, minutes = value.split(':')
    return int(hours) * MINUTES_IN_HOUR + int(minutes)


def to_time(minutes: int) -> str:
    """Переводит минуты с полуночи во время HH:mm.

    Значения больше 1439 не сворачиваются по модулю суток: 1500 -> '25:00'.
    Решение о выходе за время закрытия принимает вызывающий код.
    """
    if minutes < 0:
        raise InvalidArgumentError(
            f'Количество минут не может быть отрицательным: {minutes}',
        )
    hours, mins = divmod(minutes, MINUTES_IN_HOUR)
    return f'{hours:02d}:{mins:02d}'


def hours_to_minutes(hours: float) -> int:
    """Переводит положительную длительность в часах в целые минуты."""
    if isinstance(hours, bool) or not isinstance(hours, (int, float)):
        raise InvalidArgumentError(
            f'Длительность должна быть числом, получено: {hours!r}',
        )
    if not math.isfinite(hours) or hours <= 0:
        raise InvalidArgumentError(
            'Длительность должна быть конечной и положительной, '
            f'получено: {hours}',
        )
    return int(round(hours * MINUTES_IN_HOUR))


def add_duration(value: TimeValue, hours: float) -> str:
    """Прибавляет длительность в часах ко времени HH:mm."""
    return to_time(to_minutes(value) + hours_to_minutes(hours))


def end_minutes(value: TimeValue, hours: float) -> int:
    """Возвращает момент окончания интервала в минутах с полуночи."""
    return to_minutes(value) + hours_to_minutes(hours)


def overlaps(
    start_a: TimeValue,
    end_a: TimeValue,
    start_b: TimeValue,
    end_b: TimeValue,
) -> bool:
    """Проверяет пересечение полуоткрытых интервалов [a) и [b)."""
    return to_minutes(start_a) < to_minutes(end_b) and to_minutes(
        start_b,
    ) < to_minutes(end_a)


def is_within(value: TimeValue, start: TimeValue, end: TimeValue) -> bool:
    """Проверяет, что время попадает в полуоткрытый интервал [start, end)."""
    return to_minutes(start) <= to_minutes(value) < to_minutes(end)


def parse_date(value: DateValue) -> date:
    """Приводит дату в формате YYYY-MM-DD к объекту date.

    Raises:
        InvalidFormatError: если строка не является корректной датой

    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not is_valid_date(value):
        raise InvalidFormatError(
            f'Некорректная дата: {value!r}, ожидается формат YYYY-MM-DD',
        )
    return datetime.strptime(value, DATE_FORMAT).date()


def generate_time_slots(
    opening_time: TimeValue,
    closing_time: TimeValue,
    granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
) -> list[str]:
    """Формирует время начала слотов от открытия (включительно) до закрытия.

    Время закрытия в выборку не попадает.
    """
    if granularity_minutes <= 0:
        raise InvalidArgumentError(
            'Шаг слотов должен быть положительным, '
            f'получено: {granularity_minutes}',
        )
    return [
        to_time(minute)
        for minute in range(
            to_minutes(opening_time),
            to_minutes(closing_time),
            granularity_minutes,
        )
    ]
