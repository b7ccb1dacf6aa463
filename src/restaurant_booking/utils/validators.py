import re
from typing import Optional

from email_validator import EmailNotValidError
from email_validator import validate_email as ev_validate

from restaurant_booking.core.constants import PHONE_PATTERN
from restaurant_booking.utils.time_utils import is_valid_time


def validate_email(value: Optional[str]) -> Optional[str]:
    """Возвращает читаемое сообщение при некорректном email."""
    if not (value and value.strip()):
        return None

    try:
        ev_validate(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError(
            'Укажите адрес электронной почты, например: user@example.com',
        )
    return value


def validate_phone(value: Optional[str]) -> Optional[str]:
    """Возвращает читаемое сообщение при некорректном номере телефона."""
    if not (value and value.strip()):
        raise ValueError('Номер телефона обязателен для заполнения')

    cleaned = value.strip()
    if not re.fullmatch(PHONE_PATTERN, cleaned):
        raise ValueError(
            'Некорректный формат номера телефона, например: +1234567890',
        )
    return cleaned


def validate_time(value: str) -> str:
    """Проверяет формат времени HH:mm."""
    if not is_valid_time(value):
        raise ValueError('Время должно быть в формате HH:mm')
    return value

