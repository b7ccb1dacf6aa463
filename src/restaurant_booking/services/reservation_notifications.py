from datetime import datetime, timedelta
from typing import Optional

from loguru import logger

from restaurant_booking.core.constants import (
    DEFAULT_REMINDER_MINUTES,
    TIME_FORMAT,
)
from restaurant_booking.models import Reservation
from restaurant_booking.services.notification import (
    send_notification_task,
    send_sms_notification_task,
)
from restaurant_booking.utils.exceptions import BookingError
from restaurant_booking.utils.time_utils import add_duration


def _details(reservation: Reservation, restaurant_name: str) -> str:
    """Общий блок с деталями бронирования для писем."""
    end_time = add_duration(
        reservation.reservation_time,
        reservation.duration_hours,
    )
    return (
        f'Ресторан: {restaurant_name}\n'
        f'Дата: {reservation.reservation_date}\n'
        f'Время: {reservation.reservation_time}-{end_time}\n'
        f'Количество гостей: {reservation.party_size}\n'
        f'Номер бронирования: {reservation.id}\n'
    )


def _dispatch(
    reservation: Reservation,
    subject: str,
    text: str,
    sms_text: str,
    eta: Optional[datetime] = None,
) -> None:
    """Ставит в очередь SMS и, если указан email, письмо клиенту."""
    send_sms_notification_task(reservation.customer_phone, sms_text, eta=eta)
    if reservation.customer_email:
        send_notification_task(
            emails=[reservation.customer_email],
            text=text,
            subject=subject,
            eta=eta,
        )


class NotificationService:
    """Сервис для управления уведомлениями о бронированиях."""

    @staticmethod
    def send_confirmation(
        reservation: Reservation,
        restaurant_name: str,
    ) -> None:
        """Отправляет подтверждение нового бронирования."""
        text = (
            f'{reservation.customer_name}, ваше бронирование подтверждено!\n\n'
            f'{_details(reservation, restaurant_name)}\n'
            'Ждём вас!'
        )
        sms_text = (
            f'Бронирование в {restaurant_name} подтверждено: '
            f'{reservation.reservation_date} в {reservation.reservation_time}, '
            f'гостей: {reservation.party_size}. Номер: {reservation.id}'
        )
        _dispatch(
            reservation,
            f'Бронирование в {restaurant_name} подтверждено',
            text,
            sms_text,
        )
        logger.info(
            f'Подтверждение бронирования {reservation.id} '
            'поставлено в очередь',
        )

    @staticmethod
    def send_update_notification(
        reservation: Reservation,
        restaurant_name: str,
        changes: list[str],
    ) -> None:
        """Отправляет уведомление об изменении бронирования."""
        changes_text = '\n'.join(f'  - {change}' for change in changes)
        text = (
            f'{reservation.customer_name}, ваше бронирование изменено:\n\n'
            f'{changes_text}\n\n'
            f'Актуальные данные:\n{_details(reservation, restaurant_name)}'
        )
        sms_text = (
            f'Бронирование {reservation.id} в {restaurant_name} изменено: '
            f'{"; ".join(changes)}'
        )
        _dispatch(
            reservation,
            f'Бронирование в {restaurant_name} изменено',
            text,
            sms_text,
        )
        logger.info(
            f'Уведомление об изменении бронирования {reservation.id} '
            'поставлено в очередь',
        )

    @staticmethod
    def send_cancellation(
        reservation: Reservation,
        restaurant_name: str,
    ) -> None:
        """Отправляет уведомление об отмене бронирования."""
        text = (
            f'{reservation.customer_name}, ваше бронирование отменено.\n\n'
            f'{_details(reservation, restaurant_name)}\n'
            'Будем рады видеть вас снова!'
        )
        sms_text = (
            f'Бронирование в {restaurant_name} на '
            f'{reservation.reservation_date} {reservation.reservation_time} '
            'отменено.'
        )
        _dispatch(
            reservation,
            f'Бронирование в {restaurant_name} отменено',
            text,
            sms_text,
        )
        logger.info(
            f'Уведомление об отмене бронирования {reservation.id} '
            'поставлено в очередь',
        )

    @staticmethod
    def send_reminder(
        reservation: Reservation,
        restaurant_name: str,
        reminder_minutes: int = DEFAULT_REMINDER_MINUTES,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Планирует напоминание о бронировании.

        Args:
            reservation: Бронирование
            restaurant_name: Название ресторана
            reminder_minutes: За сколько минут до начала напомнить
            now: Текущее время (местное время ресторана)

        Returns:
            datetime: Момент отправки напоминания

        Raises:
            BookingError: Если момент напоминания уже прошёл

        """
        start = datetime.combine(
            reservation.reservation_date,
            datetime.strptime(reservation.reservation_time, TIME_FORMAT).time(),
        )
        reminder_time = start - timedelta(minutes=reminder_minutes)
        if reminder_time < (now or datetime.now()):
            error_msg = (
                'Нельзя установить напоминание на прошедшее время '
                f'для бронирования {reservation.id}'
            )
            logger.error(error_msg)
            raise BookingError(
                error_msg,
                code='REMINDER_IN_PAST',
                details={'reminder_time': reminder_time.isoformat()},
            )
        text = (
            f'{reservation.customer_name}, напоминаем о бронировании:\n\n'
            f'{_details(reservation, restaurant_name)}'
        )
        sms_text = (
            f'Напоминание: {restaurant_name}, {reservation.reservation_date} '
            f'в {reservation.reservation_time}.'
        )
        _dispatch(
            reservation,
            f'Напоминание о бронировании через {reminder_minutes} минут',
            text,
            sms_text,
            eta=reminder_time,
        )
        logger.info(
            f'Напоминание о бронировании {reservation.id} запланировано '
            f'на {reminder_time}',
        )
        return reminder_time
