from typing import Any

from celery import Celery
from celery.signals import setup_logging

from restaurant_booking.core.config import settings
from restaurant_booking.core.logging import configure_logging

celery_app = Celery(
    'booking_worker',
    broker=settings.rabbit_url,
    backend='rpc://',
)

celery_app.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    enable_utc=True,
    include=['booking_worker.tasks'],
    task_default_queue='default',
)


@setup_logging.connect
def setup_worker_logging(**kwargs: Any) -> None:
    """Логи воркера идут через loguru, как и логи API."""
    configure_logging('worker')
