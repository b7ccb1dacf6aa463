from typing import Any, Optional

from restaurant_booking.utils.exceptions import BookingError


def build_error(
    detail: Any,
    code: int,
    error: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Формирует унифицированный ответ об ошибке для API."""
    body: dict[str, Any] = {
        'code': code,
        'detail': str(detail) if detail is not None else '',
    }
    if error is not None:
        body['error'] = error
    if details:
        body['details'] = details
    return body


def build_booking_error(exc: BookingError) -> dict[str, Any]:
    """Формирует ответ об ошибке из доменного исключения."""
    return build_error(exc.message, exc.status_code, exc.code, exc.details)
