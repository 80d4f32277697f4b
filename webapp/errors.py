"""
Error Types

Exceptions raised by the stores, the credential vault and the dispatcher.
"""


class ReminderAppError(Exception):
    """Base class for all application errors."""


class ValidationError(ReminderAppError):
    """
    Bad or missing input.

    Attributes:
        policy (str): Which rule failed: "missing_field", "malformed_address"
            or "invalid_time"
        fields (list): Offending field names or values
    """

    MISSING_FIELD = "missing_field"
    MALFORMED_ADDRESS = "malformed_address"
    INVALID_TIME = "invalid_time"

    def __init__(self, message, policy, fields=None):
        super().__init__(message)
        self.message = message
        self.policy = policy
        self.fields = list(fields or [])


class AuthError(ReminderAppError):
    """Rejected registration or login attempt."""


class DuplicateEmail(AuthError):
    pass


class NotFound(AuthError):
    pass


class BadCredentials(AuthError):
    pass


class DecryptionFailure(ReminderAppError):
    """A stored mail credential could not be decrypted."""


class MailSendFailure(ReminderAppError):
    """The mail transport rejected or failed to deliver a message."""


class StoreUnavailable(ReminderAppError):
    """The database could not complete an operation."""
