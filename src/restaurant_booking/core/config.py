from pathlib import Path
from typing import Optional

from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL, make_url

from restaurant_booking.core.constants import (
    DEFAULT_ALTERNATIVES_LIMIT,
    DEFAULT_DURATION_HOURS,
    DEFAULT_SLOT_GRANULARITY_MINUTES,
)

BASE_DIR = Path(__file__).resolve().parents[3]
INFRA_DIR = BASE_DIR / 'infra'

LOG_DIR = BASE_DIR / 'logs'


class EmailSettings(BaseSettings):
    """Читает настройки из окружения с префиксом NOTIFY_."""

    MAIL_FROM: EmailStr = 'noreply@example.com'
    MAIL_USERNAME: str = ''
    MAIL_PASSWORD: str = ''
    MAIL_PORT: int = 587
    MAIL_SERVER: str = 'localhost'
    MAIL_STARTTLS: bool = True
    MAIL_SSL_TLS: bool = False
    USE_CREDENTIALS: bool = True
    VALIDATE_CERTS: bool = True

    model_config = SettingsConfigDict(
        env_file=str(INFRA_DIR / '.env'),
        env_prefix='NOTIFY_',
        extra='allow',
        validate_default=True,
    )


class Settings(BaseSettings):
    """Конфигурационный класс."""

    DATABASE_URL: Optional[str] = None

    POSTGRES_DB: str = 'restaurant_booking'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: str = 'postgres'
    POSTGRES_PORT: int = 5432
    POSTGRES_HOST: str = 'localhost'
    DB_ECHO: bool = False
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    REDIS_HOST: str = 'localhost'
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_CACHE_TTL: int = 300

    LOG_LEVEL: str = 'INFO'
    LOG_ROTATION: str = '10 MB'
    LOG_RETENTION: str = '14 days'

    RABBITMQ_DEFAULT_USER: str = 'guest'
    RABBITMQ_DEFAULT_PASS: str = 'guest'
    RABBITMQ_DEFAULT_VHOST: str = ''
    RABBITMQ_DEFAULT_HOST: str = 'localhost'
    RABBITMQ_DEFAULT_PORT: int = 5672

    API_VERSION: str = 'v1'
    SLOT_GRANULARITY_MINUTES: int = DEFAULT_SLOT_GRANULARITY_MINUTES
    DEFAULT_DURATION_HOURS: float = DEFAULT_DURATION_HOURS
    ALTERNATIVE_SLOTS_LIMIT: int = DEFAULT_ALTERNATIVES_LIMIT

    @property
    def db_url(self) -> URL:
        """Создает ссылку на подключение к Postgres."""
        if self.DATABASE_URL:
            return make_url(self.DATABASE_URL)
        return URL.create(
            drivername='postgresql+asyncpg',
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            database=self.POSTGRES_DB,
        )

    @property
    def rabbit_url(self) -> str:
        """Создает ссылку на подключение к RabbitMQ."""
        return (
            'amqp://'
            f'{self.RABBITMQ_DEFAULT_USER}:{self.RABBITMQ_DEFAULT_PASS}@'
            f'{self.RABBITMQ_DEFAULT_HOST}:{self.RABBITMQ_DEFAULT_PORT}/'
            f'{self.RABBITMQ_DEFAULT_VHOST}'
        )

    @property
    def redis_url(self) -> str:
        """URL для подключения к Redis."""
        if self.REDIS_PASSWORD:
            return (
                f'redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}'
                f':{self.REDIS_PORT}/{self.REDIS_DB}'
            )
        return f'redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}'

    model_config = SettingsConfigDict(
        env_file=str(INFRA_DIR / '.env'),
        extra='allow',
    )


settings = Settings()
email_settings = EmailSettings()
