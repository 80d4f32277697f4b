"""
Reminder Routes

Listing, scheduling and deleting the logged-in user's reminders.
"""

import logging
from flask import Blueprint, render_template, request, redirect, url_for, flash, current_app

from webapp.auth import login_required
from webapp.errors import ValidationError, StoreUnavailable
from webapp.services.reminder_service import (
    ReminderInput,
    create_reminder,
    list_active_for_user,
    soft_delete,
)

logger = logging.getLogger(__name__)

reminders_bp = Blueprint('reminders', __name__)


@reminders_bp.route('/reminders')
@login_required
def list_reminders(user):
    """Show the user's active reminders, soonest first."""
    try:
        reminders = list_active_for_user(user['user_id'])
    except StoreUnavailable as e:
        logger.error(f"Failed to load reminders for user {user['user_id']}: {e}")
        return render_template('reminders.html', title='Reminders', reminders=[],
                               error='Failed to load.')
    return render_template('reminders.html', title='Reminders', reminders=reminders)


@reminders_bp.route('/reminders/<int:reminder_id>/delete', methods=['POST'])
@login_required
def delete_reminder(user, reminder_id):
    try:
        soft_delete(reminder_id, user['user_id'])
    except StoreUnavailable as e:
        logger.error(f"Failed to delete reminder {reminder_id}: {e}")
        flash('Error deleting reminder. Please try again.', 'error')
    return redirect(url_for('reminders.list_reminders'))


@reminders_bp.route('/schedule', methods=['GET', 'POST'])
@login_required
def schedule(user):
    """Schedule a new reminder."""
    if request.method == 'GET':
        return render_template('schedule.html', title='Schedule',
                               success=request.args.get('success') == '1')

    form = request.form
    try:
        reminder_input = ReminderInput.from_form(
            message=form.get('message'),
            scheduled_time=form.get('datetime'),
            recipients=form.get('email'),
            timezone=current_app.config['REMINDER_TIMEZONE'],
        )
        create_reminder(user['user_id'], reminder_input)
    except ValidationError as e:
        return render_template('schedule.html', title='Schedule', error=e.message), 400
    except StoreUnavailable as e:
        logger.error(f"Schedule error: {e}")
        return render_template('schedule.html', title='Schedule',
                               error='Server error scheduling.'), 500

    return redirect(url_for('reminders.schedule', success=1))
