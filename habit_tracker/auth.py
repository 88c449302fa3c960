import logging
from flask import request, jsonify
import jwt
import bcrypt
from datetime import datetime, timedelta
from functools import wraps
from sqlalchemy.exc import SQLAlchemyError

from . import app, db
from .models import User

logger = logging.getLogger(__name__)


# JWT middleware
def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = request.headers.get("Authorization")
        if not token:
            logger.error("Token missing in request")
            return jsonify({"message": "Token required"}), 401
        if token.startswith("Bearer "):
            token = token[7:]
        try:
            payload = jwt.decode(token, app.config["JWT_SECRET_KEY"], algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            logger.error("Token expired")
            return jsonify({"message": "Token expired"}), 401
        except jwt.InvalidTokenError:
            logger.error("Invalid token")
            return jsonify({"message": "Invalid token"}), 401
        user = db.session.get(User, payload.get("user_id"))
        if not user:
            logger.error("User not found for token")
            return jsonify({"message": "Invalid token"}), 403
        return f(user, *args, **kwargs)
    return decorated


def generate_token(user_id, email):
    now = datetime.utcnow()
    payload = {
        "user_id": user_id,
        "email": email,
        "exp": now + timedelta(hours=app.config["JWT_EXPIRATION_HOURS"]),
        "iat": now
    }
    return jwt.encode(payload, app.config["JWT_SECRET_KEY"], algorithm="HS256")


def hash_password(password):
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password, hashed):
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


@app.route("/api/auth/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    if not all(isinstance(data.get(key) or "", str) for key in ("username", "email", "password")):
        return jsonify({"message": "Username, email, and password must be strings"}), 400
    username = (data.get("username") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password")
    if not username or not email or not password:
        return jsonify({"message": "Username, email, and password required"}), 400
    if len(password) < 6:
        return jsonify({"message": "Password must be at least 6 characters"}), 400
    if User.query.filter_by(username=username).first():
        return jsonify({"message": "Username already exists"}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({"message": "Email already exists"}), 400
    try:
        new_user = User(username=username, email=email, password=hash_password(password))
        db.session.add(new_user)
        db.session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database error registering user: {str(e)}")
        db.session.rollback()
        return jsonify({"message": "Failed to register user"}), 500
    logger.info(f"User registered: {username}")
    token = generate_token(new_user.id, new_user.email)
    return jsonify({
        "message": "User registered",
        "token": token,
        "user": {**new_user.summary(), "is_verified": new_user.is_verified}
    }), 201


@app.route("/api/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    # Can be username or email
    identifier = data.get("identifier") or data.get("email") or data.get("username")
    password = data.get("password")
    if not isinstance(identifier or "", str) or not isinstance(password or "", str):
        return jsonify({"message": "Identifier and password must be strings"}), 400
    if not identifier or not password:
        return jsonify({"message": "Identifier and password required"}), 400
    user = User.query.filter(
        (User.username == identifier) | (User.email == identifier.lower())
    ).first()
    if not user or not check_password(password, user.password):
        logger.error(f"Failed login attempt for {identifier}")
        return jsonify({"message": "Invalid credentials"}), 401
    token = generate_token(user.id, user.email)
    return jsonify({
        "token": token,
        "user": {**user.summary(), "is_verified": user.is_verified}
    }), 200


@app.route("/api/auth/profile", methods=["GET"])
@token_required
def profile(user):
    return jsonify({
        **user.summary(),
        "is_verified": user.is_verified,
        "created_at": user.created_at.isoformat()
    }), 200
