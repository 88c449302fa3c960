"""Scheduled reminder and daily reset jobs."""
import logging
from datetime import datetime
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from .mailer import send_reminder_mail
from .models import db, Habit, CheckIn
from .streak import completed_on

logger = logging.getLogger(__name__)


def send_due_reminders(now=None):
    """Mail owners of habits whose reminder time is ``now`` and that are not done today.

    Returns the number of reminders sent.
    """
    now = now or datetime.utcnow()
    current_time = now.strftime("%H:%M")
    today = now.date()
    logger.debug(f"Checking reminders at {current_time}")
    try:
        habits = Habit.query.filter_by(
            is_active=True, reminder=True, reminder_time=current_time, reminder_sent=False
        ).all()
        sent = 0
        for habit in habits:
            todays = CheckIn.query.filter_by(habit_id=habit.id, date=today).all()
            if completed_on(todays, today):
                continue
            if send_reminder_mail(habit.user.email, habit.name):
                habit.reminder_sent = True
                sent += 1
        db.session.commit()
        if sent:
            logger.info(f"Sent {sent} habit reminders for {current_time}")
        return sent
    except SQLAlchemyError as e:
        logger.error(f"Database error sending reminders: {str(e)}")
        db.session.rollback()
        return 0


def reset_day():
    """Clear the per-day reminder flag on every habit. Returns rows touched."""
    try:
        count = Habit.query.filter_by(reminder_sent=True).update({"reminder_sent": False})
        db.session.commit()
        logger.info(f"Daily reset done, {count} habits cleared")
        return count
    except SQLAlchemyError as e:
        logger.error(f"Database error during daily reset: {str(e)}")
        db.session.rollback()
        return 0


def _in_context(app, job):
    def run():
        with app.app_context():
            job()
    return run


def start_scheduler(app):
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        func=_in_context(app, send_due_reminders),
        trigger=CronTrigger(minute="*", timezone="UTC"),
        id="habit_reminders",
        name="Habit Reminders",
        replace_existing=True,
    )
    scheduler.add_job(
        func=_in_context(app, reset_day),
        trigger=CronTrigger(hour=0, minute=0, timezone="UTC"),
        id="daily_reset",
        name="Daily Reminder Reset",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Reminder scheduler started")
    return scheduler
