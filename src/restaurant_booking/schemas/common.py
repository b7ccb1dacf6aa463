from typing import Any, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Базовая схема ответа с описанием ошибки."""

    code: int
    detail: str
    error: Optional[str] = None
    details: Optional[dict[str, Any]] = None


class MessageResponse(BaseModel):
    """Схема ответа с текстовым сообщением."""

    status: str = 'success'
    message: str
