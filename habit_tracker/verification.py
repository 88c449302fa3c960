import logging
import secrets
from datetime import datetime, timedelta
from flask import request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from . import app, db
from .mailer import send_verification_mail
from .models import User, Otp

logger = logging.getLogger(__name__)


def generate_otp():
    return str(100000 + secrets.randbelow(900000))


def _payload_user():
    data = request.get_json(silent=True) or {}
    try:
        user_id = int(data.get("user_id"))
    except (TypeError, ValueError):
        return data, None
    return data, db.session.get(User, user_id)


@app.route("/api/verify/send-otp", methods=["POST"])
def send_otp():
    _, user = _payload_user()
    if not user:
        return jsonify({"message": "User not found"}), 404
    if user.is_verified:
        return jsonify({"message": "User already verified"}), 400
    try:
        otp = Otp(user_id=user.id, code=generate_otp())
        db.session.add(otp)
        db.session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database error storing otp: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Internal server error while sending otp"}), 500
    send_verification_mail(user.email, otp.code)
    logger.info(f"OTP issued for user {user.id}")
    return jsonify({"message": "OTP sent to your email"}), 200


@app.route("/api/verify/otp", methods=["POST"])
def verify_otp():
    data, user = _payload_user()
    if not user:
        return jsonify({"message": "User not found"}), 404
    if user.is_verified:
        return jsonify({"message": "User already verified"}), 400
    code = str(data.get("otp") or "").strip()
    cutoff = datetime.utcnow() - timedelta(minutes=app.config["OTP_TTL_MINUTES"])
    valid = Otp.query.filter(Otp.user_id == user.id, Otp.code == code, Otp.created_at >= cutoff).first()
    if not code or not valid:
        return jsonify({"message": "Invalid OTP"}), 400
    try:
        user.is_verified = True
        Otp.query.filter_by(user_id=user.id).delete()
        db.session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database error verifying otp: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Internal server error while verifying otp"}), 500
    logger.info(f"User {user.id} verified")
    return jsonify({"message": "User verified successfully"}), 200


@app.route("/api/verify/is-verified/<int:user_id>", methods=["GET"])
def is_verified(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"message": "User not found"}), 404
    return jsonify({
        "verified": user.is_verified,
        "message": "User already verified" if user.is_verified else "User not verified"
    }), 200
