"""
Background reminder scheduler.

Once per interval the scheduler loads every appointment whose reminder has
not been sent, picks the ones starting within the lookahead window and emails
them. The flag is only set after the mail server accepted the message, so a
failed send is retried on the next tick and a crash between send and mark can
at worst produce a duplicate reminder.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from backend.core.clock import utc_now
from backend.models.appointment import Appointment
from backend.services.notification import EmailClient
from backend.storage import AppointmentStore

logger = logging.getLogger(__name__)

JOB_ID = 'appointment-reminders'
DEFAULT_INTERVAL_SECONDS = 60
DEFAULT_LOOKAHEAD_MINUTES = 30


def is_due(appointment: Appointment, now: datetime, window_end: datetime) -> bool:
    if not appointment.email:
        return False
    return now < appointment.start_time <= window_end


class NotificationScheduler:
    def __init__(
        self,
        store: AppointmentStore,
        email_client: EmailClient,
        lookahead_minutes: int = DEFAULT_LOOKAHEAD_MINUTES,
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.email_client = email_client
        self.lookahead = timedelta(minutes=lookahead_minutes)
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._scheduler: BackgroundScheduler | None = None

    def select_due(self, appointments: list[Appointment], now: datetime) -> list[Appointment]:
        window_end = now + self.lookahead
        return [appointment for appointment in appointments if is_due(appointment, now, window_end)]

    def run_tick(self) -> list[int]:
        """Evaluate pending appointments once and return the ids reminded this tick."""
        notified: list[int] = []
        try:
            pending = self.store.list_pending_notification()
            now = self.clock()

            for appointment in self.select_due(pending, now):
                try:
                    self.email_client.send_reminder(appointment.email, appointment.title, appointment.start_time)
                    self.store.set_notified(appointment.id)
                except Exception:
                    logger.exception('Failed to send notification for appointment %s', appointment.id)
                    continue

                notified.append(appointment.id)
                logger.info('Notification sent for appointment: %s', appointment.title)
        except Exception:
            logger.exception('Error in notification scheduler tick')

        return notified

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        if self.running:
            return

        self._scheduler = BackgroundScheduler(timezone='UTC')
        self._scheduler.add_job(
            self.run_tick,
            'interval',
            seconds=self.interval_seconds,
            id=JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            'Notification scheduler started - checking every %s seconds for appointments in the next %s',
            self.interval_seconds,
            self.lookahead,
        )

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info('Notification scheduler stopped')
