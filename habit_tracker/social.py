import logging
from flask import request, jsonify
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import app, db
from .auth import token_required
from .models import User, Habit, CheckIn, Follow
from .pagination import page_args, paginate
from .streak import current_day, habit_streak

logger = logging.getLogger(__name__)


def is_following(follower_id, following_id):
    return Follow.query.filter_by(follower_id=follower_id, following_id=following_id).first() is not None


@app.route("/api/social/search", methods=["GET"])
@token_required
def search_users(user):
    q = (request.args.get("q") or "").strip()
    limit = max(request.args.get("limit", 10, type=int), 1)
    if len(q) < 2:
        return jsonify({"message": "Search query must be at least 2 characters"}), 400
    try:
        pattern = "%" + q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        users = User.query.filter(
            User.id != user.id,
            User.username.ilike(pattern, escape="\\") | User.email.ilike(pattern, escape="\\")
        ).order_by(User.username).limit(limit).all()
        return jsonify([found.summary() for found in users]), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error searching users: {str(e)}")
        return jsonify({"message": "Server error searching users"}), 500


@app.route("/api/social/follow/<int:user_id>", methods=["POST", "DELETE"])
@token_required
def follow(user, user_id):
    if request.method == "DELETE":
        edge = Follow.query.filter_by(follower_id=user.id, following_id=user_id).first()
        if not edge:
            return jsonify({"message": "Not following this user"}), 404
        try:
            db.session.delete(edge)
            db.session.commit()
            logger.info(f"User {user.id} unfollowed user {user_id}")
            return jsonify({"message": "Successfully unfollowed user"}), 200
        except SQLAlchemyError as e:
            logger.error(f"Database error unfollowing user: {str(e)}")
            db.session.rollback()
            return jsonify({"message": "Server error unfollowing user"}), 500

    if user_id == user.id:
        return jsonify({"message": "Cannot follow yourself"}), 400
    if not db.session.get(User, user_id):
        return jsonify({"message": "User not found"}), 404
    if is_following(user.id, user_id):
        return jsonify({"message": "Already following this user"}), 400
    try:
        db.session.add(Follow(follower_id=user.id, following_id=user_id))
        db.session.commit()
        logger.info(f"User {user.id} followed user {user_id}")
        return jsonify({"message": "Successfully followed user"}), 201
    except IntegrityError as e:
        logger.error(f"Duplicate follow of user {user_id} by user {user.id}: {str(e.orig)}")
        db.session.rollback()
        return jsonify({"message": "Already following this user"}), 400
    except SQLAlchemyError as e:
        logger.error(f"Database error following user: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Server error following user"}), 500


@app.route("/api/social/following", methods=["GET"])
@token_required
def following(user):
    edges = (Follow.query.filter_by(follower_id=user.id)
             .order_by(Follow.created_at.desc(), Follow.id.desc()).all())
    return jsonify([edge.following.summary() for edge in edges]), 200


@app.route("/api/social/followers", methods=["GET"])
@token_required
def followers(user):
    edges = (Follow.query.filter_by(following_id=user.id)
             .order_by(Follow.created_at.desc(), Follow.id.desc()).all())
    return jsonify([edge.follower.summary() for edge in edges]), 200


@app.route("/api/social/activity", methods=["GET"])
@token_required
def activity(user):
    limit, page = page_args(20)
    try:
        friend_ids = user.friend_ids
        if not friend_ids:
            return jsonify({
                "activities": [],
                "pagination": {"current": page, "total": 0, "count": 0, "total_count": 0}
            }), 200

        query = (CheckIn.query
                 .filter(CheckIn.user_id.in_(friend_ids), CheckIn.completed.is_(True))
                 .order_by(CheckIn.date.desc(), CheckIn.id.desc()))
        check_ins, pagination = paginate(query, limit, page)
        today = current_day()
        activities = [{
            **check_in.to_dict(),
            "user": {"id": check_in.user.id, "username": check_in.user.username},
            "habit": check_in.habit.summary(),
            "streak": habit_streak(check_in.habit_id, today)
        } for check_in in check_ins]
        return jsonify({"activities": activities, "pagination": pagination}), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching activity feed: {str(e)}")
        return jsonify({"message": "Server error fetching activity feed"}), 500


@app.route("/api/social/profile/<int:user_id>", methods=["GET"])
@token_required
def user_profile(user, user_id):
    target = db.session.get(User, user_id)
    if not target:
        return jsonify({"message": "User not found"}), 404
    try:
        habits = Habit.query.filter_by(user_id=user_id, is_active=True).all()
        total_check_ins = CheckIn.query.filter_by(user_id=user_id, completed=True).count()
        today = current_day()
        longest_streak = max((habit_streak(habit.id, today) for habit in habits), default=0)
        following_target = is_following(user.id, user_id)
        return jsonify({
            "user": target.summary(),
            "stats": {
                "total_habits": len(habits),
                "total_check_ins": total_check_ins,
                "longest_streak": longest_streak
            },
            "is_following": following_target
        }), 200
    except SQLAlchemyError as e:
        logger.error(f"Database error fetching user profile: {str(e)}")
        return jsonify({"message": "Server error fetching user profile"}), 500
