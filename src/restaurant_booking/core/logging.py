import logging
import sys
from functools import partial
from pathlib import Path

from loguru import logger

from restaurant_booking.core.config import LOG_DIR, settings
from restaurant_booking.core.constants import (
    AUDIT_LOG_NAME,
    FILE_LOG_FORMAT,
    INTERCEPTED_LOGGERS,
    LOG_COMPRESSION,
    LOG_DEPTH,
    LOG_ENCODING,
    LOG_FORMAT,
    get_logger_header,
)

_STD_INTERCEPT_CONFIGURED = False


class InterceptHandler(logging.Handler):
    """Перехват stdlib логов (uvicorn, sqlalchemy, celery) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            lvl = logger.level(record.levelname).name
        except ValueError:
            lvl = record.levelno
        logger.opt(
            depth=LOG_DEPTH,
            exception=record.exc_info,
        ).log(lvl, record.getMessage())


def setup_stdlib_intercept() -> None:
    """Перенаправляет стандартные логи в Loguru (один раз на процесс)."""
    global _STD_INTERCEPT_CONFIGURED
    if _STD_INTERCEPT_CONFIGURED:
        return
    root = logging.getLogger()
    root.handlers = [InterceptHandler()]
    root.setLevel(logging.NOTSET)

    for name in INTERCEPTED_LOGGERS:
        log = logging.getLogger(name)
        log.handlers = [InterceptHandler()]
        log.propagate = False
    _STD_INTERCEPT_CONFIGURED = True


def fill_defaults(record: dict, process: str) -> None:
    """Дополняет запись полями, которые ждут форматы логов.

    request_id есть только у записей внутри HTTP-запроса, а процесс
    (api или worker) отличает строки API от строк воркера уведомлений.
    """
    record['extra'].setdefault('request_id', '-')
    record['extra'].setdefault('process', process)


def is_audit_record(record: dict) -> bool:
    """Записи об изменениях ресторанов, столов и бронирований."""
    return bool(record['extra'].get('audit'))


def _open_log_file(path: Path, process: str) -> None:
    if path.exists() and path.stat().st_size:
        return
    try:
        with open(path, 'a', encoding=LOG_ENCODING) as f:
            f.write(get_logger_header(process))
    except OSError as e:
        sys.stderr.write(f'Не удалось записать заголовок в {path}: {e}\n')


def _add_file_sink(path: Path, process: str, **options) -> None:
    _open_log_file(path, process)
    logger.add(
        path,
        level=settings.LOG_LEVEL,
        rotation=settings.LOG_ROTATION,
        retention=settings.LOG_RETENTION,
        compression=LOG_COMPRESSION,
        format=FILE_LOG_FORMAT,
        encoding=LOG_ENCODING,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        **options,
    )


def configure_logging(process: str = 'api') -> None:
    """Настраивает Loguru для процесса API или воркера.

    Каждый процесс пишет в stdout и в свой файл <process>.log. Записи
    аудита (создание и изменение ресторанов, столов и бронирований)
    дополнительно собираются в общий файл bookings.log.

    Args:
        process: Имя процесса: 'api' или 'worker'.

    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(patcher=partial(fill_defaults, process=process))

    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format=LOG_FORMAT,
        colorize=True,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    _add_file_sink(LOG_DIR / f'{process}.log', process)
    _add_file_sink(
        LOG_DIR / AUDIT_LOG_NAME,
        process,
        filter=is_audit_record,
    )

    setup_stdlib_intercept()
