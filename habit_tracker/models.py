from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

CATEGORIES = ["health", "fitness", "learning", "productivity", "mindfulness", "social", "other"]
FREQUENCIES = ["daily", "weekly"]


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(120), nullable=False)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    habits = db.relationship("Habit", backref="user", lazy=True, cascade="all, delete-orphan")
    check_ins = db.relationship("CheckIn", backref="user", lazy=True, cascade="all, delete-orphan")

    @property
    def friend_ids(self):
        # Friends mirror the outgoing follow edges
        return [follow.following_id for follow in Follow.query.filter_by(follower_id=self.id).all()]

    def summary(self):
        return {"id": self.id, "username": self.username, "email": self.email}


class Habit(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500))
    category = db.Column(db.String(20), nullable=False, default="other")
    frequency = db.Column(db.String(10), nullable=False, default="daily")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    reminder = db.Column(db.Boolean, nullable=False, default=True)
    reminder_time = db.Column(db.String(5))  # "HH:MM"
    reminder_sent = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    check_ins = db.relationship("CheckIn", backref="habit", lazy=True, cascade="all, delete-orphan")

    def summary(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "frequency": self.frequency,
        }

    def to_dict(self):
        return {
            **self.summary(),
            "user_id": self.user_id,
            "description": self.description,
            "is_active": self.is_active,
            "reminder": self.reminder,
            "reminder_time": self.reminder_time,
            "reminder_sent": self.reminder_sent,
            "created_at": self.created_at.isoformat(),
        }


class CheckIn(db.Model):
    __tablename__ = "check_in"
    __table_args__ = (
        db.UniqueConstraint("habit_id", "date", name="uq_check_in_habit_date"),
        db.Index("ix_check_in_user_date", "user_id", "date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    habit_id = db.Column(db.Integer, db.ForeignKey("habit.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    completed = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "completed": self.completed,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }


class Follow(db.Model):
    __table_args__ = (
        db.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        db.CheckConstraint("follower_id != following_id", name="ck_follow_not_self"),
    )

    id = db.Column(db.Integer, primary_key=True)
    follower_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    following_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    follower = db.relationship("User", foreign_keys=[follower_id])
    following = db.relationship("User", foreign_keys=[following_id])


class Otp(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    code = db.Column(db.String(6), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
