import logging
from datetime import datetime
from flask import jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from . import app, db

logger = logging.getLogger(__name__)


@app.route("/api/health", methods=["GET"])
def health():
    return jsonify({
        "message": "Habit Tracker API is running!",
        "timestamp": datetime.utcnow().isoformat()
    }), 200


@app.errorhandler(404)
def not_found(e):
    return jsonify({"message": "Route not found"}), 404


@app.errorhandler(IntegrityError)
def integrity_error(e):
    logger.error(f"Integrity error: {str(e.orig)}")
    db.session.rollback()
    return jsonify({"message": "Duplicate entry"}), 400


@app.errorhandler(HTTPException)
def http_error(e):
    return jsonify({"message": e.description}), e.code


@app.errorhandler(Exception)
def unhandled_error(e):
    logger.exception(f"Unhandled error: {str(e)}")
    db.session.rollback()
    return jsonify({"message": "Internal Server Error"}), 500
