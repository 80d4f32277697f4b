"""
Session / Auth Gate

Maps the signed session cookie to a user and protects views that need one.
"""

import logging
from functools import wraps
from flask import session, redirect, url_for, flash

from webapp.errors import StoreUnavailable
from webapp.services.account_service import find_by_id

logger = logging.getLogger(__name__)

SESSION_USER_KEY = 'user_id'


def start_session(session_ctx, user_id):
    """Log the user in. Clears anything left from a previous session."""
    session_ctx.clear()
    session_ctx[SESSION_USER_KEY] = user_id


def end_session(session_ctx):
    session_ctx.clear()


def current_user(session_ctx):
    """
    Resolve the logged-in user.

    Args:
        session_ctx (Mapping): Session state for this request

    Returns:
        dict or None: The user, None when logged out or the user is gone
    """
    user_id = session_ctx.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    try:
        return find_by_id(user_id)
    except StoreUnavailable as e:
        logger.error(f"Could not resolve session user {user_id}: {e}")
        return None


def login_required(view):
    """
    Require a logged-in user.

    The view receives the user as its first argument. Anonymous requests
    are redirected to the login page.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        user = current_user(session)
        if user is None:
            flash('Please log in first.', 'error')
            return redirect(url_for('auth.login'))
        return view(user, *args, **kwargs)

    return wrapped
