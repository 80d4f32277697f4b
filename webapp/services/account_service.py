"""
Account Service

User registration, lookup and login verification.
"""

import logging
from dataclasses import dataclass
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import generate_password_hash, check_password_hash

from config.database import get_db_session
from config.models import User
from utils import is_valid_email
from webapp.errors import (
    ValidationError,
    DuplicateEmail,
    NotFound,
    BadCredentials,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistrationInput:
    """Validated registration form."""

    name: str
    email: str
    mail_password: str
    login_password: str

    @classmethod
    def from_form(cls, name=None, email=None, mail_password=None, login_password=None):
        """
        Validate raw form values.

        Raises:
            ValidationError: If a required field is missing or the email is malformed
        """
        email = (email or '').strip()
        missing = [
            field for field, value in (
                ('email', email),
                ('mailPass', mail_password),
                ('loginPassword', login_password),
            ) if not value
        ]
        if missing:
            raise ValidationError('All fields required.', ValidationError.MISSING_FIELD, missing)

        if not is_valid_email(email):
            raise ValidationError('Invalid email.', ValidationError.MALFORMED_ADDRESS, [email])

        return cls(
            name=(name or '').strip(),
            email=email,
            mail_password=mail_password,
            login_password=login_password,
        )


def _user_to_dict(user):
    return {
        'user_id': user.user_id,
        'name': user.name,
        'email': user.email,
        'login_password_hash': user.login_password_hash,
        'mail_password_cipher': user.mail_password_cipher,
        'created_at': user.created_at,
    }


def create_user(registration, vault):
    """
    Create a new user account.

    Args:
        registration (RegistrationInput): Validated registration form
        vault (CredentialVault): Vault used to encrypt the mail password

    Returns:
        dict: The created user

    Raises:
        DuplicateEmail: If the email is already registered
        StoreUnavailable: If the database fails
    """
    session = get_db_session()
    try:
        existing = session.execute(
            select(User.user_id).where(User.email == registration.email)
        ).scalar_one_or_none()
        if existing is not None:
            logger.warning(f"User with email {registration.email} already exists")
            raise DuplicateEmail('Email already registered.')

        user = User(
            name=registration.name,
            email=registration.email,
            login_password_hash=generate_password_hash(registration.login_password),
            mail_password_cipher=vault.encrypt(registration.mail_password),
        )
        session.add(user)
        session.commit()
        logger.info(f"Created user: {user.email} (ID: {user.user_id})")
        return _user_to_dict(user)
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email
        session.rollback()
        raise DuplicateEmail('Email already registered.') from e
    except SQLAlchemyError as e:
        logger.error(f"Error creating user: {e}")
        session.rollback()
        raise StoreUnavailable('Could not create user') from e
    finally:
        session.close()


def find_by_email(email):
    """
    Get user by email.

    Returns:
        dict or None: The user, None if no account uses this email
    """
    session = get_db_session()
    try:
        user = session.execute(
            select(User).where(User.email == (email or '').strip())
        ).scalar_one_or_none()
        return _user_to_dict(user) if user else None
    except SQLAlchemyError as e:
        logger.error(f"Error fetching user {email}: {e}")
        raise StoreUnavailable('Could not fetch user') from e
    finally:
        session.close()


def find_by_id(user_id):
    """
    Get user by ID.

    Returns:
        dict or None: The user, None if no such user
    """
    session = get_db_session()
    try:
        user = session.get(User, user_id)
        return _user_to_dict(user) if user else None
    except SQLAlchemyError as e:
        logger.error(f"Error fetching user {user_id}: {e}")
        raise StoreUnavailable('Could not fetch user') from e
    finally:
        session.close()


def verify_login(email, password):
    """
    Check login credentials.

    Args:
        email (str): Account email
        password (str): Plaintext login password

    Returns:
        dict: The authenticated user

    Raises:
        ValidationError: If email or password is missing
        NotFound: If no account uses this email
        BadCredentials: If the password does not match
    """
    if not email or not password:
        raise ValidationError(
            'Email and password required.',
            ValidationError.MISSING_FIELD,
            [field for field, value in (('email', email), ('password', password)) if not value],
        )

    user = find_by_email(email)
    if user is None:
        raise NotFound('No account found with that email.')

    if not check_password_hash(user['login_password_hash'], password):
        logger.info(f"Failed login attempt for user {user['user_id']}")
        raise BadCredentials('Wrong password. Please try again.')

    return user
