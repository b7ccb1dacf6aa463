from datetime import datetime

# Формат времени и даты
TIME_PATTERN = r'^([01][0-9]|2[0-3]):[0-5][0-9]$'
DATE_PATTERN = r'^\d{4}-\d{2}-\d{2}$'
TIME_FORMAT = '%H:%M'
DATE_FORMAT = '%Y-%m-%d'
MINUTES_IN_HOUR = 60

# Настройки бронирования
MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20
MIN_TABLE_CAPACITY = 1
MAX_TABLE_CAPACITY = 20
MIN_DURATION_HOURS = 0.5
MAX_DURATION_HOURS = 4
DEFAULT_DURATION_HOURS = 2
DEFAULT_SLOT_GRANULARITY_MINUTES = 30
DEFAULT_ALTERNATIVES_LIMIT = 3
DEFAULT_REMINDER_MINUTES = 60

# Ключи кеша
SLOTS_CACHE_PREFIX = 'slots'
SLOTS_GENERATION_PREFIX = 'slots_gen'

# Настройки логгера
MS_IN_SECOND = 1000
LOG_DEPTH = 7
LOG_ENCODING = 'utf-8'
LOG_COMPRESSION = 'zip'
AUDIT_LOG_NAME = 'bookings.log'
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '{extra[process]} | {extra[request_id]} | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
FILE_LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | '
    '{extra[process]} | {extra[request_id]} | '
    '{name}:{function}:{line} | {message}'
)
INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'sqlalchemy',
    'celery',
)
NOISE_PATHS = {'/docs', '/openapi.json', '/health', '/livez', '/readyz'}
HTTP_LOG_TEMPLATE = (
    '{method} {path} -> {status} ({ms:.1f} ms)\n    ip={ip}\n    ua={ua}\n'
)

# Разрешённый формат телефонного номера
PHONE_PATTERN = r'^\+?\(?[0-9]{1,4}\)?[-\s.]?\(?[0-9]{1,4}\)?[-\s.]?[0-9]{1,9}$'


def get_logger_header(process: str) -> str:
    """Формирует заголовок для нового лог-файла процесса."""
    return (
        '\n'
        '============= LOGGER - RESTAURANT_TABLE_BOOKING ==============\n'
        f'Process: {process}\n'
        f'Date: {datetime.now():%Y-%m-%d %H:%M:%S}\n'
        '================================================================\n\n'
    )
