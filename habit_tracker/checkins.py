import logging
from flask import request, jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import app, db
from .auth import token_required
from .habits import active_habit
from .models import CheckIn
from .pagination import page_args, paginate
from .streak import current_day

logger = logging.getLogger(__name__)


def checked_in_on(habit_id, day):
    return CheckIn.query.filter_by(habit_id=habit_id, date=day).first() is not None


def validate_check_in(data, partial=False):
    fields = {}
    if "completed" in data or not partial:
        if not isinstance(data.get("completed"), bool):
            return None, "Completed must be a boolean"
        fields["completed"] = data["completed"]
    if "notes" in data:
        notes = data.get("notes")
        if notes is not None and not isinstance(notes, str):
            return None, "Notes must be a string"
        notes = (notes or "").strip()
        if len(notes) > 200:
            return None, "Notes must be less than 200 characters"
        fields["notes"] = notes or None
    return fields, None


@app.route("/api/checkins/<int:habit_id>", methods=["POST"])
@token_required
def create_check_in(user, habit_id):
    data = request.get_json(silent=True) or {}
    fields, error = validate_check_in(data)
    if error:
        return jsonify({"message": "Validation failed", "errors": [error]}), 400
    habit = active_habit(user, habit_id)
    if not habit:
        return jsonify({"message": "Habit not found"}), 404
    today = current_day()
    if checked_in_on(habit_id, today):
        return jsonify({"message": "Already checked in for this habit today"}), 400
    try:
        check_in = CheckIn(habit_id=habit_id, user_id=user.id, date=today, **fields)
        db.session.add(check_in)
        db.session.commit()
        logger.info(f"Check-in recorded for habit {habit_id} by user {user.username}")
        return jsonify({"message": "Check-in recorded successfully", "check_in": check_in.to_dict()}), 201
    except IntegrityError as e:
        # Another request stored today's check-in first
        logger.error(f"Duplicate check-in for habit {habit_id}: {str(e.orig)}")
        db.session.rollback()
        return jsonify({"message": "Already checked in for this habit today"}), 400
    except SQLAlchemyError as e:
        logger.error(f"Database error creating check-in: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Server error creating check-in"}), 500


@app.route("/api/checkins/habit/<int:habit_id>", methods=["GET"])
@token_required
def habit_check_ins(user, habit_id):
    habit = active_habit(user, habit_id)
    if not habit:
        return jsonify({"message": "Habit not found"}), 404
    limit, page = page_args(30)
    try:
        query = CheckIn.query.filter_by(habit_id=habit_id).order_by(CheckIn.date.desc())
        check_ins, pagination = paginate(query, limit, page)
        logger.debug(f"Fetched history for habit {habit_id}: {len(check_ins)} check-ins")
        return jsonify({
            "check_ins": [check_in.to_dict() for check_in in check_ins],
            "pagination": pagination
        }), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching check-ins: {str(e)}")
        return jsonify({"message": "Server error fetching check-ins"}), 500


@app.route("/api/checkins", methods=["GET"])
@token_required
def user_check_ins(user):
    limit, page = page_args(50)
    habit_id = request.args.get("habit_id", type=int)
    try:
        query = CheckIn.query.filter_by(user_id=user.id)
        if habit_id is not None:
            query = query.filter_by(habit_id=habit_id)
        query = query.order_by(CheckIn.date.desc(), CheckIn.id.desc())
        check_ins, pagination = paginate(query, limit, page)
        return jsonify({
            "check_ins": [
                {**check_in.to_dict(), "habit": check_in.habit.summary()}
                for check_in in check_ins
            ],
            "pagination": pagination
        }), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching check-ins: {str(e)}")
        return jsonify({"message": "Server error fetching check-ins"}), 500


@app.route("/api/checkins/<int:check_in_id>", methods=["PUT", "DELETE"])
@token_required
def check_in(user, check_in_id):
    check_in = CheckIn.query.filter_by(id=check_in_id, user_id=user.id).first()
    if not check_in:
        return jsonify({"message": "Check-in not found"}), 404

    if request.method == "PUT":
        data = request.get_json(silent=True) or {}
        # The date of a check-in never changes
        fields, error = validate_check_in(data, partial=True)
        if error:
            return jsonify({"message": "Validation failed", "errors": [error]}), 400
        try:
            for key, value in fields.items():
                setattr(check_in, key, value)
            db.session.commit()
            logger.info(f"Check-in {check_in_id} updated by user {user.username}")
            return jsonify({"message": "Check-in updated successfully", "check_in": check_in.to_dict()}), 200
        except SQLAlchemyError as e:
            logger.error(f"Database error updating check-in: {str(e)}")
            db.session.rollback()
            return jsonify({"message": "Server error updating check-in"}), 500

    try:
        db.session.delete(check_in)
        db.session.commit()
        logger.info(f"Check-in {check_in_id} deleted by user {user.username}")
        return jsonify({"message": "Check-in deleted successfully"}), 200
    except SQLAlchemyError as e:
        logger.error(f"Error deleting check-in {check_in_id}: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Server error deleting check-in"}), 500
