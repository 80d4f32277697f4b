"""
Email address helpers shared by registration, scheduling and dispatch.
"""

import re

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def is_valid_email(email):
    """Return True if email looks like a single address."""
    if not email:
        return False
    return bool(EMAIL_RE.match(email))


def split_recipients(recipients):
    """
    Split a comma-separated recipient string.

    Entries are trimmed and empty entries dropped. Order is kept and
    duplicates are not removed.

    Args:
        recipients (str or None): e.g. "b@x.com, c@x.com"

    Returns:
        list: Recipient addresses
    """
    if not recipients:
        return []
    return [part.strip() for part in recipients.split(',') if part.strip()]


def find_invalid_emails(addresses):
    """Return the entries of addresses that are not valid emails."""
    return [address for address in addresses if not is_valid_email(address)]
