"""
Flask Application Factory

Creates and configures the Flask application instance.
"""

import atexit
import logging
from flask import Flask, render_template, session

from config.database import configure_database, init_database
from config.settings import load_settings
from utils import format_local_time, utc_now
from webapp.auth import current_user
from webapp.routes.auth import auth_bp
from webapp.routes.reminders import reminders_bp
from webapp.services.credential_vault import CredentialVault
from webapp.services.dispatcher import ReminderDispatcher

logger = logging.getLogger(__name__)


def create_app(settings=None, dispatcher=None):
    """
    Create and configure the Flask application.

    Args:
        settings (Settings, optional): Configuration; loaded from the
            environment when omitted
        dispatcher (ReminderDispatcher, optional): Dispatcher to attach;
            built from settings when omitted

    Returns:
        Flask: The application
    """
    if settings is None:
        settings = load_settings()

    app = Flask(__name__)
    app.secret_key = settings.session_secret
    app.config['REMINDER_TIMEZONE'] = settings.reminder_timezone

    configure_database(settings.database_url)
    init_database()

    vault = CredentialVault(settings.aes_secret_key)
    if dispatcher is None:
        dispatcher = ReminderDispatcher.from_settings(settings, vault)
    app.extensions['credential_vault'] = vault
    app.extensions['reminder_dispatcher'] = dispatcher

    if settings.dispatcher_enabled:
        dispatcher.start()
        atexit.register(dispatcher.stop)

    app.register_blueprint(auth_bp)
    app.register_blueprint(reminders_bp)

    @app.context_processor
    def inject_current_user():
        return {'current_user': current_user(session)}

    @app.template_filter('local_time')
    def local_time_filter(value):
        return format_local_time(value, settings.reminder_timezone)

    @app.route('/admin/dispatcher/status')
    def dispatcher_status():
        """Health check endpoint for the reminder dispatcher."""
        return {
            'status': 'ok',
            'dispatcher': dispatcher.status(),
            'timestamp': utc_now().isoformat(),
        }

    @app.route('/')
    def home():
        return render_template('index.html', title='Home')

    @app.route('/about')
    def about():
        return render_template('about.html', title='About')

    return app
