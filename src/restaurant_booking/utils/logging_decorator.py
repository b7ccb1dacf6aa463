import json
from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException, status
from loguru import logger


def _serialize(obj: Any, only_set: bool = True) -> dict | None:
    """Сериализует объект Pydantic в словарь для логирования."""
    if hasattr(obj, 'model_dump'):
        try:
            return obj.model_dump(
                mode='json',
                exclude_none=True,
                exclude_unset=only_set,
            )
        except Exception as e:
            logger.debug(
                f'Ошибка сериализации модели {e}',
            )
    return None


def event_logger(
    event_type: str,
    table_name: str,
    only_set: bool = True,
) -> Callable:
    """Декоратор для логирования выполнения эндпоинта.

    Логирует успешное выполнение асинхронного эндпоинта вместе с
    переданными данными и идентификатором записи. Отказы по бизнес-правилам
    (4xx) пишутся как предупреждения, остальные ошибки - как ошибки.

    Args:
        event_type: Тип события ('Создана', 'Обновлена').
        table_name: Название таблицы, над которой выполняется операция.
        only_set: Флаг, указывающий сериализовать ли только заданные поля.
            По умолчанию True.

    Returns:
        Callable: Декоратор, оборачивающий асинхронную функцию и
            добавляющий логирование.

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            parameters = next(
                (
                    data
                    for data in (
                        _serialize(v, only_set) for v in kwargs.values()
                    )
                    if data is not None
                ),
                None,
            )
            try:
                result = await func(*args, **kwargs)
            except HTTPException as e:
                if e.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
                    logger.warning(
                        f'Операция с таблицей "{table_name}" отклонена '
                        f'({e.status_code})',
                    )
                else:
                    logger.error(
                        f'Произошла ошибка при выполнении операции с '
                        f'таблицей "{table_name}"',
                    )
                raise
            if parameters is not None:
                formatted_params = json.dumps(
                    parameters,
                    ensure_ascii=False,
                    indent=4,
                )
                logger.bind(audit=True).info(
                    f'{event_type} запись в таблице "{table_name}" '
                    f'(id={getattr(result, "id", "-")}), '
                    f'с параметрами:\n{formatted_params}',
                )
            return result

        return wrapper

    return decorator
