"""
Reminder Service

Creation, listing, soft deletion and dispatch bookkeeping for reminders.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy import select, update, and_
from sqlalchemy.exc import SQLAlchemyError

from config.database import get_db_session
from config.models import User, Reminder
from utils import parse_scheduled_time, to_utc_naive, utc_now, split_recipients, find_invalid_emails
from webapp.errors import ValidationError, StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReminderInput:
    """Validated schedule form."""

    message: str
    scheduled_time: datetime  # naive UTC
    recipients: Optional[str] = None

    @classmethod
    def from_form(cls, message=None, scheduled_time=None, recipients=None, timezone='UTC'):
        """
        Validate raw form values.

        Args:
            message (str): Reminder text
            scheduled_time (str or datetime): When to send
            recipients (str, optional): Comma-separated addresses
            timezone (str): Zone for timestamps without an offset

        Raises:
            ValidationError: On a missing field, an unparsable time or a
                malformed recipient address
        """
        message = (message or '').strip()
        if isinstance(scheduled_time, str):
            scheduled_time = scheduled_time.strip()

        missing = [
            field for field, value in (('message', message), ('datetime', scheduled_time))
            if not value
        ]
        if missing:
            raise ValidationError(
                'Message and date/time required.', ValidationError.MISSING_FIELD, missing
            )

        try:
            when = parse_scheduled_time(scheduled_time, timezone)
        except ValueError as e:
            raise ValidationError(str(e), ValidationError.INVALID_TIME, ['datetime']) from e

        addresses = split_recipients(recipients)
        invalid = find_invalid_emails(addresses)
        if invalid:
            raise ValidationError(
                f"One or more recipient emails are invalid: {', '.join(invalid)}",
                ValidationError.MALFORMED_ADDRESS,
                invalid,
            )

        return cls(
            message=message,
            scheduled_time=when,
            recipients=', '.join(addresses) if addresses else None,
        )


def _reminder_to_dict(reminder):
    return {
        'reminder_id': reminder.reminder_id,
        'user_id': reminder.user_id,
        'recipients': reminder.recipients,
        'message': reminder.message,
        'scheduled_time': reminder.scheduled_time,
        'sent': reminder.sent,
        'deleted': reminder.deleted,
        'created_at': reminder.created_at,
        'sent_at': reminder.sent_at,
    }


def create_reminder(user_id, reminder_input):
    """
    Create a new reminder.

    Args:
        user_id (int): Owner
        reminder_input (ReminderInput): Validated schedule form

    Returns:
        dict: The created reminder

    Raises:
        StoreUnavailable: If the database fails
    """
    session = get_db_session()
    try:
        reminder = Reminder(
            user_id=user_id,
            recipients=reminder_input.recipients,
            message=reminder_input.message,
            scheduled_time=reminder_input.scheduled_time,
            sent=False,
            deleted=False,
        )
        session.add(reminder)
        session.commit()
        logger.info(
            f"Created reminder {reminder.reminder_id} for user {user_id} "
            f"at {reminder.scheduled_time:%Y-%m-%d %H:%M} UTC"
        )
        return _reminder_to_dict(reminder)
    except SQLAlchemyError as e:
        logger.error(f"Error creating reminder for user {user_id}: {e}")
        session.rollback()
        raise StoreUnavailable('Could not create reminder') from e
    finally:
        session.close()


def list_active_for_user(user_id):
    """
    Get a user's reminders that are not deleted, soonest first.
    """
    session = get_db_session()
    try:
        stmt = (
            select(Reminder)
            .where(and_(Reminder.user_id == user_id, Reminder.deleted.is_not(True)))
            .order_by(Reminder.scheduled_time.asc(), Reminder.reminder_id.asc())
        )
        return [_reminder_to_dict(r) for r in session.execute(stmt).scalars().all()]
    except SQLAlchemyError as e:
        logger.error(f"Error fetching reminders for user {user_id}: {e}")
        raise StoreUnavailable('Could not load reminders') from e
    finally:
        session.close()


def soft_delete(reminder_id, requesting_user_id):
    """
    Mark a reminder as deleted.

    Reminders that don't exist or belong to someone else are left alone
    without an error.

    Returns:
        bool: True if a reminder owned by the requester was matched
    """
    session = get_db_session()
    try:
        stmt = (
            update(Reminder)
            .where(and_(
                Reminder.reminder_id == reminder_id,
                Reminder.user_id == requesting_user_id,
            ))
            .values(deleted=True)
        )
        result = session.execute(stmt)
        session.commit()
        if result.rowcount > 0:
            logger.info(f"Soft-deleted reminder {reminder_id}")
        return result.rowcount > 0
    except SQLAlchemyError as e:
        logger.error(f"Error deleting reminder {reminder_id}: {e}")
        session.rollback()
        raise StoreUnavailable('Could not delete reminder') from e
    finally:
        session.close()


def find_due_unsent(now=None):
    """
    Get every reminder that is due, unsent and not deleted, with its owner.

    Owner fields are None when the owning user row is missing.

    Args:
        now (datetime, optional): Cutoff; defaults to the current UTC time

    Returns:
        list: One dict per due reminder
    """
    cutoff = utc_now() if now is None else to_utc_naive(now)

    session = get_db_session()
    try:
        stmt = (
            select(Reminder, User)
            .outerjoin(User, Reminder.user_id == User.user_id)
            .where(and_(
                Reminder.scheduled_time <= cutoff,
                Reminder.sent.is_(False),
                Reminder.deleted.is_not(True),
            ))
            .order_by(Reminder.scheduled_time.asc(), Reminder.reminder_id.asc())
        )
        results = session.execute(stmt).all()

        due = []
        for reminder, user in results:
            item = _reminder_to_dict(reminder)
            item['owner_email'] = user.email if user else None
            item['owner_mail_password_cipher'] = user.mail_password_cipher if user else None
            due.append(item)
        return due
    except SQLAlchemyError as e:
        logger.error(f"Error fetching due reminders: {e}")
        raise StoreUnavailable('Could not fetch due reminders') from e
    finally:
        session.close()


def mark_sent(reminder_id):
    """
    Mark a reminder as sent. Safe to call more than once.

    Returns:
        bool: True if the reminder exists
    """
    session = get_db_session()
    try:
        reminder = session.get(Reminder, reminder_id)
        if reminder is None:
            return False
        if not reminder.sent:
            reminder.sent = True
            reminder.sent_at = utc_now()
            session.commit()
            logger.info(f"Marked reminder {reminder_id} as sent")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Error marking reminder {reminder_id} sent: {e}")
        session.rollback()
        raise StoreUnavailable('Could not mark reminder sent') from e
    finally:
        session.close()
