import re
import logging
from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import app, db
from .auth import token_required
from .models import Habit, CheckIn, CATEGORIES, FREQUENCIES
from .streak import current_day, completed_on, habit_streak

logger = logging.getLogger(__name__)

REMINDER_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_habit(data, partial=False):
    """Return (fields, error) for a create or update payload."""
    fields = {}
    if "name" in data or not partial:
        name = data.get("name") or ""
        if not isinstance(name, str):
            return None, "Habit name must be a string"
        name = name.strip()
        if not 1 <= len(name) <= 100:
            return None, "Habit name must be between 1 and 100 characters"
        fields["name"] = name
    if data.get("category") is not None:
        category = data["category"]
        if not isinstance(category, str) or category.lower() not in CATEGORIES:
            return None, "Invalid category"
        fields["category"] = category.lower()
    if data.get("frequency") is not None:
        frequency = data["frequency"]
        if not isinstance(frequency, str) or frequency.lower() not in FREQUENCIES:
            return None, "Frequency must be 'daily' or 'weekly'"
        fields["frequency"] = frequency.lower()
    if "description" in data:
        description = data.get("description") or ""
        if not isinstance(description, str):
            return None, "Description must be a string"
        description = description.strip()
        if len(description) > 500:
            return None, "Description must be at most 500 characters"
        fields["description"] = description or None
    if "reminder" in data:
        if not isinstance(data["reminder"], bool):
            return None, "Reminder must be a boolean"
        fields["reminder"] = data["reminder"]
    if "reminder_time" in data:
        reminder_time = data.get("reminder_time")
        if reminder_time and not (isinstance(reminder_time, str) and REMINDER_TIME.match(reminder_time)):
            return None, "Reminder time must use HH:MM"
        fields["reminder_time"] = reminder_time or None
    return fields, None


def name_taken(user_id, name, exclude_id=None):
    query = Habit.query.filter_by(user_id=user_id, name=name, is_active=True)
    if exclude_id is not None:
        query = query.filter(Habit.id != exclude_id)
    return query.first() is not None


def active_habit(user, id):
    return Habit.query.filter_by(id=id, user_id=user.id, is_active=True).first()


@app.route("/api/habits", methods=["GET", "POST"])
@token_required
def habits(user):
    if request.method == "GET":
        try:
            habits = (Habit.query.filter_by(user_id=user.id, is_active=True)
                      .order_by(Habit.created_at.desc(), Habit.id.desc()).all())
            today = current_day()
            result = []
            for habit in habits:
                todays = CheckIn.query.filter_by(habit_id=habit.id, date=today).all()
                result.append({
                    **habit.to_dict(),
                    "checked_in_today": completed_on(todays, today),
                    "streak": habit_streak(habit.id, today)
                })
            logger.debug(f"Fetched {len(habits)} habits for user {user.username}")
            return jsonify(result), 200
        except SQLAlchemyError as e:
            logger.error(f"Database error fetching habits: {str(e)}")
            return jsonify({"message": "Server error fetching habits"}), 500

    data = request.get_json(silent=True) or {}
    logger.debug(f"Create habit payload: {data}")
    fields, error = validate_habit(data)
    if error:
        logger.error(f"Invalid habit payload: {error}")
        return jsonify({"message": "Validation failed", "errors": [error]}), 400
    if name_taken(user.id, fields["name"]):
        return jsonify({"message": "You already have a habit with this name"}), 400
    try:
        new_habit = Habit(user_id=user.id, **fields)
        db.session.add(new_habit)
        db.session.commit()
        logger.info(f"Habit created: {new_habit.name} for user {user.username}")
        return jsonify({
            "message": "Habit created successfully",
            "habit": {**new_habit.to_dict(), "checked_in_today": False, "streak": 0}
        }), 201
    except SQLAlchemyError as e:
        logger.error(f"Database error creating habit: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Server error creating habit"}), 500


@app.route("/api/habits/<int:id>", methods=["PUT", "DELETE"])
@token_required
def habit(user, id):
    habit = active_habit(user, id)
    if not habit:
        logger.error(f"Habit {id} not found for user {user.id}")
        return jsonify({"message": "Habit not found"}), 404

    if request.method == "PUT":
        data = request.get_json(silent=True) or {}
        logger.debug(f"Update habit {id} payload: {data}")
        fields, error = validate_habit(data, partial=True)
        if error:
            logger.error(f"Invalid habit payload: {error}")
            return jsonify({"message": "Validation failed", "errors": [error]}), 400
        if "name" in fields and fields["name"] != habit.name and name_taken(user.id, fields["name"], exclude_id=id):
            return jsonify({"message": "You already have a habit with this name"}), 400
        try:
            for key, value in fields.items():
                setattr(habit, key, value)
            db.session.commit()
            logger.info(f"Habit {id} updated for user {user.username}")
            return jsonify({"message": "Habit updated successfully", "habit": habit.to_dict()}), 200
        except SQLAlchemyError as e:
            logger.error(f"Database error updating habit: {str(e)}")
            db.session.rollback()
            return jsonify({"message": "Server error updating habit"}), 500

    try:
        habit.is_active = False
        db.session.commit()
        logger.info(f"Habit {id} deleted successfully by user {user.id}")
        return jsonify({"message": "Habit deleted successfully"}), 200
    except SQLAlchemyError as e:
        logger.error(f"Error deleting habit {id}: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Server error deleting habit"}), 500
