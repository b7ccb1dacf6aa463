import asyncio

from fastapi_mail.errors import ConnectionErrors
from loguru import logger

from booking_worker.main import celery_app
from restaurant_booking.core.notification import send_notification


@celery_app.task(name='send-notification')
def send_email_task(
    emails: list[str],
    text: str,
    subject: str,
    html: bool,
) -> None:
    """Таска на отправку email-уведомления о бронировании."""
    try:
        asyncio.run(
            send_notification(
                emails=emails,
                text=text,
                subject=subject,
                html=html,
            ),
        )
    except ConnectionErrors:
        logger.error(f'Не удалось отправить письмо на {", ".join(emails)}')
        raise


@celery_app.task(name='send-sms')
def send_sms_task(phone: str, text: str) -> None:
    """Таска на отправку SMS.

    SMS-шлюз не подключен, сообщение только пишется в лог.
    """
    logger.info(f'SMS на номер {phone}: {text}')
