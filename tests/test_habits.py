from habit_tracker.models import db, Habit


def test_create_habit(client, user, auth_header):
    response = client.post("/api/habits", headers=auth_header(user), json={
        "name": "  Meditate ", "category": "Mindfulness", "reminder_time": "21:00"
    })
    assert response.status_code == 201
    habit = response.get_json()["habit"]
    assert habit["name"] == "Meditate"
    assert habit["category"] == "mindfulness"
    assert habit["frequency"] == "daily"
    assert habit["reminder_time"] == "21:00"
    assert habit["streak"] == 0
    assert habit["checked_in_today"] is False


def test_create_habit_validation(client, user, auth_header):
    headers = auth_header(user)
    for payload in (
        {"name": ""},
        {"name": "x" * 101},
        {"name": "Run", "category": "sleep"},
        {"name": "Run", "frequency": "monthly"},
        {"name": "Run", "reminder_time": "25:00"},
        {"name": "Run", "description": "d" * 501},
    ):
        response = client.post("/api/habits", headers=headers, json=payload)
        assert response.status_code == 400, payload
        assert response.get_json()["message"] == "Validation failed"


def test_duplicate_name_among_active_habits(client, user, auth_header, habit_factory):
    habit_factory(name="Read")
    habit_factory(name="Walk", is_active=False)
    headers = auth_header(user)
    assert client.post("/api/habits", headers=headers, json={"name": "Read"}).status_code == 400
    assert client.post("/api/habits", headers=headers, json={"name": "Walk"}).status_code == 201


def test_list_habits_with_streak_and_today_state(client, user, auth_header, habit_factory, check_in_factory):
    read = habit_factory(name="Read")
    walk = habit_factory(name="Walk")
    habit_factory(name="Old", is_active=False)
    for days_ago in (0, 1, 2):
        check_in_factory(read, days_ago=days_ago)
    check_in_factory(walk, days_ago=1)
    check_in_factory(walk, days_ago=0, completed=False)

    response = client.get("/api/habits", headers=auth_header(user))
    assert response.status_code == 200
    habits = {habit["name"]: habit for habit in response.get_json()}
    assert set(habits) == {"Read", "Walk"}
    assert habits["Read"]["streak"] == 3
    assert habits["Read"]["checked_in_today"] is True
    assert habits["Walk"]["streak"] == 1
    assert habits["Walk"]["checked_in_today"] is False


def test_habits_are_scoped_to_owner(client, user, user_factory, auth_header, habit_factory):
    other = user_factory("other")
    habit = habit_factory(owner=other)
    headers = auth_header(user)
    assert client.get("/api/habits", headers=headers).get_json() == []
    assert client.put(f"/api/habits/{habit.id}", headers=headers, json={"name": "Mine"}).status_code == 404
    assert client.delete(f"/api/habits/{habit.id}", headers=headers).status_code == 404


def test_update_habit(client, user, auth_header, habit_factory):
    habit = habit_factory(name="Read")
    habit_factory(name="Walk")
    headers = auth_header(user)
    response = client.put(f"/api/habits/{habit.id}", headers=headers, json={"frequency": "weekly", "reminder": False})
    assert response.status_code == 200
    assert response.get_json()["habit"]["frequency"] == "weekly"
    assert response.get_json()["habit"]["reminder"] is False
    assert client.put(f"/api/habits/{habit.id}", headers=headers, json={"name": "Walk"}).status_code == 400
    assert client.put(f"/api/habits/{habit.id}", headers=headers, json={"name": "Read"}).status_code == 200
    assert client.put(f"/api/habits/{habit.id}", headers=headers, json={"category": "nope"}).status_code == 400


def test_delete_is_soft(client, user, auth_header, habit_factory):
    habit = habit_factory()
    headers = auth_header(user)
    assert client.delete(f"/api/habits/{habit.id}", headers=headers).status_code == 200
    assert db.session.get(Habit, habit.id).is_active is False
    assert client.delete(f"/api/habits/{habit.id}", headers=headers).status_code == 404
    assert client.get("/api/habits", headers=headers).get_json() == []


def test_non_string_fields_are_rejected(client, user, auth_header, habit_factory):
    headers = auth_header(user)
    for payload in (
        {"name": 5},
        {"name": ["Run"]},
        {"name": "Run", "category": 3},
        {"name": "Run", "frequency": True},
        {"name": "Run", "description": {"text": "x"}},
    ):
        response = client.post("/api/habits", headers=headers, json=payload)
        assert response.status_code == 400, payload
        assert response.get_json()["message"] == "Validation failed"
    habit = habit_factory()
    assert client.put(f"/api/habits/{habit.id}", headers=headers, json={"name": 7}).status_code == 400
