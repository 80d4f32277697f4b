"""
Authentication Routes

Handles user registration, login and logout.
"""

import logging
from flask import Blueprint, render_template, request, redirect, url_for, session, current_app

from webapp.auth import start_session, end_session
from webapp.errors import ValidationError, AuthError, StoreUnavailable
from webapp.services.account_service import RegistrationInput, create_user, verify_login

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """Create an account and log it in."""
    if request.method == 'GET':
        return render_template('register.html', title='Register')

    form = request.form
    try:
        registration = RegistrationInput.from_form(
            name=form.get('name'),
            email=form.get('email'),
            mail_password=form.get('mailPass'),
            login_password=form.get('loginPassword'),
        )
        user = create_user(registration, current_app.extensions['credential_vault'])
    except (ValidationError, AuthError) as e:
        return render_template('register.html', title='Register', error=str(e)), 400
    except StoreUnavailable as e:
        logger.error(f"Register error: {e}")
        return render_template('register.html', title='Register', error='Server error.'), 500

    start_session(session, user['user_id'])
    return redirect(url_for('reminders.list_reminders'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        return render_template('login.html', title='Login')

    try:
        user = verify_login(request.form.get('email'), request.form.get('password'))
    except (ValidationError, AuthError) as e:
        return render_template('login.html', title='Login', error=str(e)), 401
    except StoreUnavailable as e:
        logger.error(f"Login error: {e}")
        return render_template('login.html', title='Login', error='Server error.'), 500

    start_session(session, user['user_id'])
    return redirect(url_for('reminders.list_reminders'))


@auth_bp.route('/logout', methods=['POST'])
def logout():
    end_session(session)
    return redirect(url_for('home'))
