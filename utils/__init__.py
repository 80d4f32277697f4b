"""
Utility modules for the email reminder application.
"""

from .time_utils import parse_scheduled_time, to_utc_naive, format_local_time, utc_now
from .validators import is_valid_email, split_recipients, find_invalid_emails

__all__ = [
    'parse_scheduled_time',
    'to_utc_naive',
    'format_local_time',
    'utc_now',
    'is_valid_email',
    'split_recipients',
    'find_invalid_emails',
]
