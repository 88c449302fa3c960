import os
import logging
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from dotenv import load_dotenv

from .models import db

# Load environment variables
load_dotenv()

# Initialize Flask app
app = Flask(__name__)
app.config.from_object(os.getenv("APP_SETTINGS", "habit_tracker.config.Config"))

# Configure logging
logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

CORS(app, resources={r"/api/*": {
    "origins": app.config["FRONTEND_URL"],
    "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    "allow_headers": ["Content-Type", "Authorization"],
    "supports_credentials": True
}})

db.init_app(app)
migrate = Migrate(app, db)

# Create database tables
with app.app_context():
    db.create_all()

from . import errors, auth, habits, checkins, social, verification  # noqa: E402,F401
