"""
Email Service

Sends reminder emails through each user's own mail account.
"""

import smtplib
import logging
from email.mime.text import MIMEText

from webapp.errors import MailSendFailure

logger = logging.getLogger(__name__)

REMINDER_SUBJECT = "Reminder"


def build_reminder_message(sender_email, recipients, body):
    """
    Build the reminder email.

    Args:
        sender_email (str): Owner's address, used as From
        recipients (list): To addresses
        body (str): Reminder text

    Returns:
        MIMEText: Plain text message
    """
    message = MIMEText(body, "plain", "utf-8")
    message["From"] = sender_email
    message["To"] = ", ".join(recipients)
    message["Subject"] = REMINDER_SUBJECT
    return message


def send_reminder_email(sender_email, app_password, recipients, body,
                        smtp_server="smtp.gmail.com", smtp_port=587, timeout=30):
    """
    Send one reminder email, authenticating as the sender.

    Args:
        sender_email (str): Owner's address, used as From and SMTP login
        app_password (str): Owner's decrypted mail app password
        recipients (list): To addresses
        body (str): Reminder text
        smtp_server (str): SMTP host
        smtp_port (int): SMTP port (STARTTLS)
        timeout (int): Socket timeout in seconds

    Raises:
        MailSendFailure: If the server rejects the login or the message, or
            cannot be reached
    """
    message = build_reminder_message(sender_email, recipients, body)

    try:
        with smtplib.SMTP(smtp_server, smtp_port, timeout=timeout) as server:
            server.starttls()
            server.login(sender_email, app_password)
            server.send_message(message, from_addr=sender_email, to_addrs=recipients)
    except smtplib.SMTPException as e:
        raise MailSendFailure(f"SMTP error sending as {sender_email}: {e}") from e
    except OSError as e:
        raise MailSendFailure(f"Could not reach {smtp_server}:{smtp_port}: {e}") from e

    logger.info(f"Reminder email sent from {sender_email} to {len(recipients)} recipient(s)")
