"""Streak calculation shared by the habit list, activity feed and profile views.

A streak is the number of consecutive calendar days with a completed check-in,
ending today or, when today has nothing yet, ending yesterday.
"""
import logging
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from .models import CheckIn

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def current_day():
    """Return the current calendar day (UTC)."""
    return datetime.utcnow().date()


def to_day(value):
    """Normalize a date, datetime or ISO-8601 string to a calendar day.

    Returns None when the value cannot be read as a day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _read(record, field, default=None):
    if isinstance(record, dict):
        return record.get(field, default)
    return getattr(record, field, default)


def completed_days(check_ins):
    """Return the set of distinct days holding a completed check-in."""
    days = set()
    try:
        records = iter(check_ins or ())
    except TypeError:
        logger.warning(f"Check-ins are not iterable: {check_ins!r}")
        return days
    for check_in in records:
        if not _read(check_in, "completed", False):
            continue
        day = to_day(_read(check_in, "date"))
        if day is None:
            logger.debug(f"Skipping check-in with unreadable date: {check_in!r}")
            continue
        days.add(day)
    return days


def completed_on(check_ins, day):
    """Tell whether any completed check-in falls on ``day``."""
    day = to_day(day)
    if day is None:
        return False
    return day in completed_days(check_ins)


def calculate_streak(check_ins, today=None):
    """Compute the current streak for one habit's check-ins.

    ``check_ins`` is any iterable of records exposing ``date`` and ``completed``
    (ORM rows or dicts), in any order. Duplicate days count once. Never raises;
    input it cannot read yields 0.
    """
    today = to_day(today if today is not None else current_day())
    if today is None:
        logger.warning("Streak requested with an unreadable reference day")
        return 0

    days = completed_days(check_ins)
    if not days:
        return 0

    if today in days:
        cursor = today
    elif today > date.min and today - ONE_DAY in days:
        cursor = today - ONE_DAY
    else:
        return 0

    streak = 0
    for day in sorted(days, reverse=True):
        if day > cursor:
            continue
        if day < cursor:
            break
        streak += 1
        if cursor == date.min:
            break
        cursor -= ONE_DAY
    return streak


def habit_streak(habit_id, today=None):
    """Load a habit's completed check-ins and return its current streak."""
    try:
        check_ins = CheckIn.query.filter_by(habit_id=habit_id, completed=True).all()
        return calculate_streak(check_ins, today)
    except SQLAlchemyError as e:
        logger.error(f"Database error calculating streak for habit {habit_id}: {str(e)}")
        return 0
    except Exception as e:
        logger.exception(f"Error calculating streak for habit {habit_id}: {str(e)}")
        return 0
