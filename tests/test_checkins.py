from datetime import timedelta

from habit_tracker import checkins
from habit_tracker.models import db, CheckIn


def test_check_in_today(client, user, auth_header, habit_factory, today):
    habit = habit_factory()
    response = client.post(f"/api/checkins/{habit.id}", headers=auth_header(user), json={
        "completed": True, "notes": " felt good "
    })
    assert response.status_code == 201
    check_in = response.get_json()["check_in"]
    assert check_in["date"] == today.isoformat()
    assert check_in["notes"] == "felt good"

    listed = client.get("/api/habits", headers=auth_header(user)).get_json()[0]
    assert listed["checked_in_today"] is True
    assert listed["streak"] == 1


def test_second_check_in_same_day_is_rejected(client, user, auth_header, habit_factory):
    habit = habit_factory()
    headers = auth_header(user)
    assert client.post(f"/api/checkins/{habit.id}", headers=headers, json={"completed": True}).status_code == 201
    response = client.post(f"/api/checkins/{habit.id}", headers=headers, json={"completed": True})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Already checked in for this habit today"
    assert CheckIn.query.count() == 1


def test_check_in_validation_and_missing_habit(client, user, user_factory, auth_header, habit_factory):
    habit = habit_factory()
    headers = auth_header(user)
    assert client.post(f"/api/checkins/{habit.id}", headers=headers, json={}).status_code == 400
    assert client.post(f"/api/checkins/{habit.id}", headers=headers, json={
        "completed": True, "notes": "n" * 201
    }).status_code == 400
    other = habit_factory(name="Theirs", owner=user_factory("other"))
    assert client.post(f"/api/checkins/{other.id}", headers=headers, json={"completed": True}).status_code == 404
    inactive = habit_factory(name="Gone", is_active=False)
    assert client.post(f"/api/checkins/{inactive.id}", headers=headers, json={"completed": True}).status_code == 404


def test_habit_history_is_paginated(client, user, auth_header, habit_factory, check_in_factory, today):
    habit = habit_factory()
    for days_ago in range(5):
        check_in_factory(habit, days_ago=days_ago)
    response = client.get(f"/api/checkins/habit/{habit.id}?limit=2&page=2", headers=auth_header(user))
    assert response.status_code == 200
    body = response.get_json()
    assert [c["date"] for c in body["check_ins"]] == [
        (today - timedelta(days=2)).isoformat(),
        (today - timedelta(days=3)).isoformat(),
    ]
    assert body["pagination"] == {"current": 2, "total": 3, "count": 2, "total_count": 5}


def test_user_check_ins_include_habit_and_filter(client, user, auth_header, habit_factory, check_in_factory):
    read = habit_factory(name="Read")
    walk = habit_factory(name="Walk")
    check_in_factory(read, days_ago=0)
    check_in_factory(walk, days_ago=1)
    headers = auth_header(user)

    body = client.get("/api/checkins", headers=headers).get_json()
    assert [c["habit"]["name"] for c in body["check_ins"]] == ["Read", "Walk"]
    assert body["pagination"]["total_count"] == 2

    body = client.get(f"/api/checkins?habit_id={walk.id}", headers=headers).get_json()
    assert [c["habit_id"] for c in body["check_ins"]] == [walk.id]


def test_update_check_in_keeps_date(client, user, auth_header, habit_factory, check_in_factory, today):
    check_in = check_in_factory(habit_factory(), days_ago=1)
    response = client.put(f"/api/checkins/{check_in.id}", headers=auth_header(user), json={
        "completed": False, "notes": "skipped", "date": "2000-01-01"
    })
    assert response.status_code == 200
    body = response.get_json()["check_in"]
    assert body["completed"] is False
    assert body["notes"] == "skipped"
    assert body["date"] == (today - timedelta(days=1)).isoformat()


def test_delete_check_in_only_by_owner(client, user, user_factory, auth_header, habit_factory, check_in_factory):
    check_in = check_in_factory(habit_factory())
    other = user_factory("other")
    assert client.delete(f"/api/checkins/{check_in.id}", headers=auth_header(other)).status_code == 404
    assert client.delete(f"/api/checkins/{check_in.id}", headers=auth_header(user)).status_code == 200
    assert db.session.get(CheckIn, check_in.id) is None


def test_concurrent_duplicate_check_in_is_a_client_error(monkeypatch, client, user, auth_header, habit_factory, check_in_factory):
    habit = habit_factory()
    check_in_factory(habit, days_ago=0)
    # The existence check misses a row stored by a parallel request
    monkeypatch.setattr(checkins, "checked_in_on", lambda habit_id, day: False)
    response = client.post(f"/api/checkins/{habit.id}", headers=auth_header(user), json={"completed": True})
    assert response.status_code == 400
    assert response.get_json()["message"] == "Already checked in for this habit today"
    assert CheckIn.query.count() == 1
