"""Pytest configuration and shared fixtures for the habit tracker tests.

Every test runs against a fresh in-memory SQLite schema inside a pushed
application context, so factories and HTTP calls share one session.
"""

import os
from datetime import timedelta

import pytest

os.environ["APP_SETTINGS"] = "habit_tracker.config.TestConfig"

from habit_tracker import app as flask_app  # noqa: E402
from habit_tracker.auth import generate_token, hash_password  # noqa: E402
from habit_tracker.models import db, User, Habit, CheckIn, Follow  # noqa: E402
from habit_tracker.streak import current_day  # noqa: E402


@pytest.fixture(autouse=True)
def app():
    """Provide the app with a clean database for each test."""
    ctx = flask_app.app_context()
    ctx.push()
    db.drop_all()
    db.create_all()
    yield flask_app
    db.session.remove()
    ctx.pop()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def today():
    return current_day()


@pytest.fixture
def user_factory():
    """Create and persist users; the password is always 'secret123'."""

    def _create_user(username="tester", email=None, verified=False):
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password=hash_password("secret123"),
            is_verified=verified,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _create_user


@pytest.fixture
def user(user_factory):
    return user_factory()


@pytest.fixture
def auth_header():
    """Build an Authorization header for a user."""

    def _header(user):
        return {"Authorization": f"Bearer {generate_token(user.id, user.email)}"}

    return _header


@pytest.fixture
def habit_factory(user):
    def _create_habit(name="Read", owner=None, **fields):
        habit = Habit(user_id=(owner or user).id, name=name, **fields)
        db.session.add(habit)
        db.session.commit()
        return habit

    return _create_habit


@pytest.fixture
def check_in_factory(today):
    """Create check-ins ``days_ago`` days before today."""

    def _create_check_in(habit, days_ago=0, completed=True, notes=None):
        check_in = CheckIn(
            habit_id=habit.id,
            user_id=habit.user_id,
            date=today - timedelta(days=days_ago),
            completed=completed,
            notes=notes,
        )
        db.session.add(check_in)
        db.session.commit()
        return check_in

    return _create_check_in


@pytest.fixture
def follow():
    def _follow(follower, followee):
        edge = Follow(follower_id=follower.id, following_id=followee.id)
        db.session.add(edge)
        db.session.commit()
        return edge

    return _follow
