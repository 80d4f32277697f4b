"""
Reminder Dispatcher

Periodic sweep that finds due reminders and emails them through their
owners' mail accounts.
"""

import logging
import threading
from functools import partial
from apscheduler.schedulers.background import BackgroundScheduler

from utils import split_recipients, utc_now
from webapp.errors import DecryptionFailure, MailSendFailure, StoreUnavailable
from webapp.services.email_service import send_reminder_email
from webapp.services.reminder_service import find_due_unsent, mark_sent

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "reminder-sweep"


def resolve_recipients(reminder):
    """Reminder's own recipients, or the owner's address when it has none."""
    recipients = split_recipients(reminder.get('recipients'))
    return recipients or [reminder['owner_email']]


class ReminderDispatcher:
    """
    Sends due reminders on a fixed interval.

    Each reminder is handled independently: a missing owner, an undecryptable
    credential or a failed send is logged and the reminder stays pending for
    the next sweep, while the rest of the sweep carries on.
    """

    def __init__(self, vault, interval_seconds=60, sender=None,
                 smtp_server="smtp.gmail.com", smtp_port=587, smtp_timeout=30):
        self.vault = vault
        self.interval_seconds = interval_seconds
        self.sender = sender or partial(
            send_reminder_email,
            smtp_server=smtp_server,
            smtp_port=smtp_port,
            timeout=smtp_timeout,
        )
        self._scheduler = None
        self._lock = threading.Lock()
        self.last_sweep_at = None
        self.last_summary = None

    @classmethod
    def from_settings(cls, settings, vault):
        return cls(
            vault,
            interval_seconds=settings.dispatch_interval_seconds,
            smtp_server=settings.smtp_server,
            smtp_port=settings.smtp_port,
            smtp_timeout=settings.smtp_timeout,
        )

    @property
    def running(self):
        return self._scheduler is not None and self._scheduler.running

    def start(self):
        """Start the background sweep. No-op if already running."""
        with self._lock:
            if self.running:
                return
            self._scheduler = BackgroundScheduler(timezone="UTC")
            self._scheduler.add_job(
                self.sweep,
                'interval',
                seconds=self.interval_seconds,
                id=SWEEP_JOB_ID,
                max_instances=1,
                coalesce=True,
            )
            self._scheduler.start()
            logger.info(f"Reminder dispatcher started (every {self.interval_seconds}s)")

    def stop(self):
        """Stop the background sweep and wait for a running sweep to finish."""
        with self._lock:
            if not self.running:
                return
            self._scheduler.shutdown(wait=True)
            self._scheduler = None
            logger.info("Reminder dispatcher stopped")

    def status(self):
        return {
            'running': self.running,
            'interval_seconds': self.interval_seconds,
            'last_sweep_at': self.last_sweep_at.isoformat() if self.last_sweep_at else None,
            'last_summary': self.last_summary,
        }

    def sweep(self, now=None):
        """
        Run one dispatch cycle.

        Args:
            now (datetime, optional): Cutoff for due reminders; defaults to
                the current UTC time

        Returns:
            dict: Counts of due, sent, skipped and failed reminders
        """
        now = now or utc_now()
        summary = {'due': 0, 'sent': 0, 'skipped': 0, 'failed': 0}
        logger.debug(f"Dispatch sweep started (cutoff {now:%Y-%m-%d %H:%M:%S} UTC)")

        try:
            reminders = find_due_unsent(now)
        except StoreUnavailable as e:
            logger.error(f"Dispatch sweep aborted, store unavailable: {e}")
            self._record(now, summary)
            return summary

        summary['due'] = len(reminders)
        if reminders:
            logger.info(f"Dispatching {len(reminders)} due reminder(s)")

        for reminder in reminders:
            outcome = self._dispatch_one(reminder)
            summary[outcome] += 1

        self._record(now, summary)
        return summary

    def _dispatch_one(self, reminder):
        reminder_id = reminder['reminder_id']

        if not reminder.get('owner_email'):
            logger.warning(
                f"Skipping reminder {reminder_id}: owner {reminder['user_id']} not found"
            )
            return 'skipped'

        try:
            app_password = self._decrypt_credential(reminder)
        except DecryptionFailure as e:
            logger.error(f"Skipping reminder {reminder_id}: {e}")
            return 'skipped'

        recipients = resolve_recipients(reminder)

        try:
            self.sender(reminder['owner_email'], app_password, recipients, reminder['message'])
        except MailSendFailure as e:
            logger.error(f"Mail error for reminder {reminder_id}: {e}")
            return 'failed'
        except Exception as e:
            logger.error(f"Unexpected error sending reminder {reminder_id}: {e}", exc_info=True)
            return 'failed'

        try:
            mark_sent(reminder_id)
        except StoreUnavailable as e:
            # Sent but not recorded: the next sweep sends it again
            logger.error(f"Sent reminder {reminder_id} but could not mark it sent: {e}")
            return 'failed'

        logger.info(f"Sent reminder {reminder_id}")
        return 'sent'

    def _decrypt_credential(self, reminder):
        app_password = self.vault.decrypt(reminder.get('owner_mail_password_cipher'))
        if app_password is None:
            raise DecryptionFailure(
                f"cannot decrypt mail password for user {reminder['user_id']}"
            )
        return app_password

    def _record(self, now, summary):
        self.last_sweep_at = now
        self.last_summary = summary
