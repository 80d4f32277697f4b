"""
Reminder dispatcher sweep tests.
"""

import logging
from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from config.models import User
from webapp.errors import MailSendFailure, StoreUnavailable
from webapp.services import dispatcher as dispatcher_module
from webapp.services.account_service import RegistrationInput, create_user
from webapp.services.credential_vault import CredentialVault
from webapp.services.dispatcher import ReminderDispatcher, resolve_recipients
from webapp.services.reminder_service import (
    ReminderInput,
    create_reminder,
    list_active_for_user,
    soft_delete,
    find_due_unsent,
)

NOW = datetime(2025, 1, 1, 9, 0)


class FakeSender:
    """Records sends; fails for senders listed in fail_for."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def __call__(self, sender_email, app_password, recipients, body):
        if sender_email in self.fail_for:
            raise MailSendFailure("535 authentication failed")
        self.sent.append({
            'from': sender_email,
            'password': app_password,
            'to': recipients,
            'body': body,
        })


def register(vault, email, mail_password="app-pw-1"):
    return create_user(
        RegistrationInput.from_form(email=email, mail_password=mail_password, login_password="secret1"),
        vault,
    )


def schedule(user, when="2025-01-01T09:00", message="Pay rent", recipients=None):
    return create_reminder(
        user["user_id"],
        ReminderInput.from_form(message=message, scheduled_time=when, recipients=recipients),
    )


def is_sent(user, reminder):
    for item in list_active_for_user(user["user_id"]):
        if item["reminder_id"] == reminder["reminder_id"]:
            return item["sent"]
    raise AssertionError("reminder not listed")


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def dispatcher(db, vault, sender):
    return ReminderDispatcher(vault, sender=sender)


def test_sends_to_owner_when_no_recipients(dispatcher, sender, vault):
    alice = register(vault, "a@x.com")
    reminder = schedule(alice)

    summary = dispatcher.sweep(NOW)

    assert summary == {'due': 1, 'sent': 1, 'skipped': 0, 'failed': 0}
    assert sender.sent == [{
        'from': "a@x.com",
        'password': "app-pw-1",
        'to': ["a@x.com"],
        'body': "Pay rent",
    }]
    assert is_sent(alice, reminder) is True


def test_sends_to_explicit_recipients(dispatcher, sender, vault):
    alice = register(vault, "a@x.com")
    schedule(alice, recipients="b@x.com, c@x.com")

    dispatcher.sweep(NOW)

    assert sender.sent[0]['to'] == ["b@x.com", "c@x.com"]


def test_not_due_yet(dispatcher, sender, vault):
    alice = register(vault, "a@x.com")
    reminder = schedule(alice)

    summary = dispatcher.sweep(NOW - timedelta(minutes=1))

    assert summary['due'] == 0
    assert sender.sent == []
    assert is_sent(alice, reminder) is False


def test_sent_once(dispatcher, sender, vault):
    alice = register(vault, "a@x.com")
    schedule(alice)

    dispatcher.sweep(NOW)
    dispatcher.sweep(NOW + timedelta(minutes=1))

    assert len(sender.sent) == 1


def test_deleted_reminder_not_sent(dispatcher, sender, vault):
    alice = register(vault, "a@x.com")
    reminder = schedule(alice)
    soft_delete(reminder["reminder_id"], alice["user_id"])

    summary = dispatcher.sweep(NOW)

    assert summary['due'] == 0
    assert sender.sent == []


def test_decryption_failure_skips_and_continues(db, sender):
    good_vault = CredentialVault("right-secret")
    broken = register(CredentialVault("old-secret"), "broken@x.com")
    healthy = register(good_vault, "a@x.com")
    broken_reminder = schedule(broken, when="2025-01-01T08:00")
    healthy_reminder = schedule(healthy, when="2025-01-01T08:30")

    summary = ReminderDispatcher(good_vault, sender=sender).sweep(NOW)

    assert summary == {'due': 2, 'sent': 1, 'skipped': 1, 'failed': 0}
    assert [s['from'] for s in sender.sent] == ["a@x.com"]
    assert is_sent(broken, broken_reminder) is False
    assert is_sent(healthy, healthy_reminder) is True


def test_send_failure_leaves_pending_and_retries(db, vault):
    alice = register(vault, "a@x.com")
    reminder = schedule(alice)

    failing = FakeSender(fail_for={"a@x.com"})
    summary = ReminderDispatcher(vault, sender=failing).sweep(NOW)
    assert summary['failed'] == 1
    assert is_sent(alice, reminder) is False

    working = FakeSender()
    summary = ReminderDispatcher(vault, sender=working).sweep(NOW + timedelta(minutes=1))
    assert summary['sent'] == 1
    assert is_sent(alice, reminder) is True


def test_send_failure_does_not_stop_sweep(db, vault):
    alice = register(vault, "a@x.com")
    bob = register(vault, "b@x.com", mail_password="app-pw-2")
    schedule(alice, when="2025-01-01T08:00")
    schedule(bob, when="2025-01-01T08:30")

    sender = FakeSender(fail_for={"a@x.com"})
    summary = ReminderDispatcher(vault, sender=sender).sweep(NOW)

    assert summary == {'due': 2, 'sent': 1, 'skipped': 0, 'failed': 1}
    assert sender.sent[0]['password'] == "app-pw-2"


def test_unexpected_sender_error_is_contained(db, vault):
    alice = register(vault, "a@x.com")
    schedule(alice)

    def exploding_sender(*args):
        raise RuntimeError("boom")

    summary = ReminderDispatcher(vault, sender=exploding_sender).sweep(NOW)
    assert summary['failed'] == 1


def test_missing_owner_skipped(dispatcher, sender, vault, db):
    alice = register(vault, "a@x.com")
    schedule(alice)
    # Point the reminder's owner row at an id that no longer exists
    session = db.get_db_session()
    session.execute(update(User).where(User.user_id == alice["user_id"]).values(user_id=999))
    session.commit()
    session.close()

    summary = dispatcher.sweep(NOW)

    assert summary == {'due': 1, 'sent': 0, 'skipped': 1, 'failed': 0}
    assert sender.sent == []


def test_store_unavailable_ends_sweep(dispatcher, sender, monkeypatch):
    def unavailable(now):
        raise StoreUnavailable("database is locked")

    monkeypatch.setattr(dispatcher_module, "find_due_unsent", unavailable)

    summary = dispatcher.sweep(NOW)

    assert summary == {'due': 0, 'sent': 0, 'skipped': 0, 'failed': 0}
    assert dispatcher.status()['last_summary'] == summary


def test_status_records_last_sweep(dispatcher):
    dispatcher.sweep(NOW)
    status = dispatcher.status()
    assert status['running'] is False
    assert status['last_sweep_at'] == NOW.isoformat()


def test_start_and_stop(dispatcher):
    dispatcher.interval_seconds = 3600
    dispatcher.start()
    try:
        assert dispatcher.running is True
        dispatcher.start()
        assert dispatcher.running is True
    finally:
        dispatcher.stop()
    assert dispatcher.running is False


def test_resolve_recipients_drops_empty_entries():
    reminder = {'recipients': "b@x.com, ,c@x.com,", 'owner_email': "a@x.com"}
    assert resolve_recipients(reminder) == ["b@x.com", "c@x.com"]
    assert resolve_recipients({'recipients': None, 'owner_email': "a@x.com"}) == ["a@x.com"]


def test_due_query_sees_only_pending_after_sweep(dispatcher, vault):
    alice = register(vault, "a@x.com")
    schedule(alice)
    dispatcher.sweep(NOW)
    assert find_due_unsent(NOW) == []


def test_every_sweep_logs_its_start(dispatcher, caplog):
    with caplog.at_level(logging.DEBUG, logger="webapp.services.dispatcher"):
        summary = dispatcher.sweep(NOW)

    assert summary['due'] == 0
    assert any("Dispatch sweep started" in record.getMessage() for record in caplog.records)
