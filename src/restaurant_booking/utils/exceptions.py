from typing import Any, Optional

from fastapi import status


class BookingError(ValueError):
    """Базовая ошибка бизнес-правил бронирования.

    Наследуется от ValueError, поэтому обработчики, перехватывающие
    ValueError, продолжают работать без изменений.
    """

    code = 'VALIDATION_ERROR'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Сохраняет код ошибки, HTTP-статус и детали."""
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class InvalidFormatError(BookingError):
    """Некорректный формат времени или даты."""

    code = 'INVALID_FORMAT'


class InvalidArgumentError(BookingError):
    """Недопустимое значение аргумента (длительность, вместимость и т.п.)."""

    code = 'INVALID_ARGUMENT'


class NotFoundError(BookingError):
    """Запрошенный объект не найден."""

    code = 'NOT_FOUND'
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str, object_id: Any = None) -> None:
        """Добавляет идентификатор ненайденного объекта в детали."""
        super().__init__(
            message,
            details={'id': str(object_id)} if object_id is not None else None,
        )


class ConflictError(BookingError):
    """Конфликт с существующими данными."""

    code = 'CONFLICT'
    status_code = status.HTTP_409_CONFLICT
