from conftest import fetch_rows, insert_row

DAY = "2026-03-02"  # a Monday

DAILY_PLAN = {
    "focus": "Upper push and pull",
    "body_parts": ["chest", "upper back"],
    "intensity": "heavy",
    "exercises": [
        {"name": "Bench Press", "body_part": "chest", "sets": 4, "reps": 5},
        {"name": "Barbell Row", "body_part": "upper back", "sets": 4, "reps": 6},
        {"name": "Cable Crossover Machine", "body_part": "chest", "sets": 3, "reps": 12},
    ],
    "notes": "Keep two reps in reserve.",
}


def _session(user_id, day=DAY, intensity="moderate"):
    return insert_row("workout_sessions", user_id=user_id, date=day, intensity=intensity, workout_type="main")


def _set(session_id, exercise_id, number, completed=False, weight=0, reps=10, actual_weight=None, actual_reps=None):
    return insert_row(
        "exercise_sets", session_id=session_id, exercise_id=exercise_id, set_number=number,
        planned_weight=weight, planned_reps=reps, completed=completed,
        actual_weight=actual_weight, actual_reps=actual_reps,
    )


def _names_by_set(session):
    return [s["exercise"]["name"] for s in session["sets"]]


# --- Generation and materialization ---

def test_generate_materializes_session_sets_and_meals(client, auth, catalog, meals, llm):
    llm.json_replies.append(DAILY_PLAN)
    response = client.post("/workouts/generate", headers=auth, json={"date": DAY})
    assert response.status_code == 200
    session = response.json()["data"]

    assert session["date"] == DAY
    assert session["day_of_week"] == "Monday"
    assert session["week_number"] == 10
    # intensity comes from the workout intent, not the model
    assert session["intensity"] == "moderate"
    names = _names_by_set(session)
    assert names.count("Bench Press") == 4
    assert names.count("Barbell Row") == 4
    # unknown name falls back to an unused exercise of the same body part
    assert names.count("Incline Dumbbell Press") == 3
    assert all(s["planned_weight"] == 0 for s in session["sets"])

    today = client.get(f"/workouts/today?date={DAY}", headers=auth).json()["data"]
    assert [m["meal_type"] for m in today["meals"]] == ["breakfast", "lunch", "dinner", "snack"]


def test_regenerating_a_day_supersedes_the_old_session(client, auth, user, catalog, meals, llm):
    llm.json_replies.extend([DAILY_PLAN, DAILY_PLAN])
    first = client.post("/workouts/generate", headers=auth, json={"date": DAY}).json()["data"]
    second = client.post("/workouts/generate", headers=auth, json={"date": DAY}).json()["data"]

    sessions = fetch_rows("workout_sessions", user_id=user["id"])
    assert [s["id"] for s in sessions] == [second["id"]]
    assert fetch_rows("exercise_sets", session_id=first["id"]) == []
    assert fetch_rows("daily_meals", session_id=first["id"]) == []
    assert len(fetch_rows("exercise_sets", session_id=second["id"])) == 11


def test_generation_never_selects_blocked_exercises(client, auth, catalog, llm):
    client.post("/blocked-items", headers=auth, json={
        "item_type": "exercise", "item_id": catalog["Bench Press"], "item_name": "Bench Press",
    })
    llm.json_replies.append(DAILY_PLAN)
    session = client.post("/workouts/generate", headers=auth, json={"date": DAY}).json()["data"]
    assert "Bench Press" not in _names_by_set(session)


def test_generation_applies_progression_from_history(client, auth, user, catalog, llm):
    past = _session(user["id"], day="2026-02-27")
    for number in (1, 2, 3):
        _set(past, catalog["Bench Press"], number, completed=True, weight=60, reps=5, actual_weight=60, actual_reps=5)

    llm.json_replies.append(DAILY_PLAN)
    session = client.post("/workouts/generate", headers=auth, json={"date": DAY}).json()["data"]
    bench = [s for s in session["sets"] if s["exercise"]["name"] == "Bench Press"]
    assert {s["planned_weight"] for s in bench} == {62.5}


def test_generation_respects_weekly_body_part_ceiling(client, auth, user, catalog, llm):
    earlier = _session(user["id"], day="2026-03-03")
    for number in range(1, 19):
        _set(earlier, catalog["Chest Cable Fly"], number)

    llm.json_replies.append(DAILY_PLAN)
    session = client.post("/workouts/generate", headers=auth, json={"date": "2026-03-05"}).json()["data"]
    chest_sets = [s for s in session["sets"] if s["exercise"]["body_part"] == "chest"]
    assert len(chest_sets) == 2


def test_generation_failure_leaves_existing_session(client, auth, user, catalog, llm):
    existing = _session(user["id"])
    llm.json_replies.append({"focus": "nothing", "exercises": []})
    response = client.post("/workouts/generate", headers=auth, json={"date": DAY})
    assert response.status_code == 500
    assert [s["id"] for s in fetch_rows("workout_sessions")] == [existing]


# --- Editing ---

def test_complete_set_is_monotonic_and_last_write_wins(client, auth, user, catalog):
    session = _session(user["id"])
    set_id = _set(session, catalog["Squat"], 1, weight=100, reps=5)

    data = client.post(f"/workouts/sets/{set_id}/complete", headers=auth,
                       json={"actual_weight": 100, "actual_reps": 5, "completed": True}).json()["data"]
    assert data["completed"] is True

    data = client.post(f"/workouts/sets/{set_id}/complete", headers=auth,
                       json={"actual_weight": 102.5, "actual_reps": 4, "actual_rpe": 9, "completed": False}).json()["data"]
    assert data["completed"] is True
    assert (data["actual_weight"], data["actual_reps"], data["actual_rpe"]) == (102.5, 4, 9)


def test_reduce_volume_remove_set(client, auth, user, catalog):
    session = _session(user["id"])
    a, b = catalog["Squat"], catalog["Leg Extension"]
    for number in (1, 2, 3):
        _set(session, a, number)
    for number in (1, 2):
        _set(session, b, number)

    response = client.post(f"/workouts/sessions/{session}/reduce", headers=auth, json={"mode": "remove_set"})
    assert response.json()["data"]["removed_sets"] == 2
    remaining = fetch_rows("exercise_sets", session_id=session)
    assert sorted(s["set_number"] for s in remaining if s["exercise_id"] == a) == [1, 2]
    assert sorted(s["set_number"] for s in remaining if s["exercise_id"] == b) == [1]


def test_reduce_volume_remove_exercise(client, auth, user, catalog):
    session = _session(user["id"])
    a, b = catalog["Squat"], catalog["Leg Extension"]
    for number in (1, 2, 3):
        _set(session, a, number)
    for number in (1, 2):
        _set(session, b, number)

    client.post(f"/workouts/sessions/{session}/reduce", headers=auth, json={"mode": "remove_exercise"})
    remaining = fetch_rows("exercise_sets", session_id=session)
    assert {s["exercise_id"] for s in remaining} == {b}
    assert len(remaining) == 2


def test_reduce_volume_on_empty_session(client, auth, user):
    session = _session(user["id"])
    response = client.post(f"/workouts/sessions/{session}/reduce", headers=auth, json={"mode": "remove_exercise"})
    assert response.json()["success"] is False
    response = client.post(f"/workouts/sessions/{session}/reduce", headers=auth, json={"mode": "remove_set"})
    assert response.json()["data"]["removed_sets"] == 0


def test_move_session(client, auth, user):
    session = _session(user["id"])
    response = client.post(f"/workouts/sessions/{session}/move", headers=auth, json={"new_date": "2026-03-03"})
    data = response.json()["data"]
    assert (data["date"], data["day_of_week"]) == ("2026-03-03", "Tuesday")


def test_move_session_onto_occupied_date_fails_without_changes(client, auth, user):
    session = _session(user["id"])
    _session(user["id"], day="2026-03-04")
    response = client.post(f"/workouts/sessions/{session}/move", headers=auth, json={"new_date": "2026-03-04"})
    body = response.json()
    assert body["success"] is False
    assert "2026-03-04" in body["error"]
    assert fetch_rows("workout_sessions", id=session)[0]["date"] == DAY


def test_add_accessory_to_upcoming_sessions(client, auth, user, catalog):
    first = _session(user["id"], day="2026-03-03")
    second = _session(user["id"], day="2026-03-05")
    _session(user["id"], day="2026-03-20")
    _set(first, catalog["Bicep Curl"], 1)

    response = client.post("/workouts/accessory", headers=auth, json={
        "body_part": "biceps", "count": 5, "reference_date": DAY,
    })
    added = response.json()["data"]
    assert [item["session_id"] for item in added] == [first, second]

    first_sets = [s for s in fetch_rows("exercise_sets", session_id=first) if s["exercise_id"] == catalog["Bicep Curl"]]
    # only one biceps exercise exists, so it is reused with continued set numbers
    assert sorted(s["set_number"] for s in first_sets) == [1, 2, 3, 4]
    second_sets = fetch_rows("exercise_sets", session_id=second)
    assert len(second_sets) == 3
    assert all(s["planned_reps"] == 12 and s["planned_weight"] == 0 for s in second_sets)


def test_add_accessory_without_upcoming_sessions(client, auth, catalog):
    response = client.post("/workouts/accessory", headers=auth, json={"body_part": "biceps", "reference_date": DAY})
    assert response.json()["success"] is False


def test_swap_exercise_replaces_sets_with_fresh_rows(client, auth, user, catalog):
    session = _session(user["id"])
    old_ids = {
        _set(session, catalog["Bench Press"], number, completed=True, weight=80, reps=8, actual_weight=80, actual_reps=8)
        for number in (1, 2, 3)
    }

    response = client.post(f"/workouts/sessions/{session}/swap", headers=auth,
                           json={"exercise_id": catalog["Bench Press"]})
    data = response.json()["data"]
    assert data["removed"]["name"] == "Bench Press"
    assert data["added"]["name"] == "Incline Dumbbell Press"

    sets = fetch_rows("exercise_sets", session_id=session)
    # completed rows are never flipped back; they are removed with the old exercise
    assert not old_ids & {s["id"] for s in sets}
    assert {s["exercise_id"] for s in sets} == {catalog["Incline Dumbbell Press"]}
    assert [(s["set_number"], s["planned_reps"]) for s in sets] == [(1, 8), (2, 8), (3, 8)]
    assert not any(s["completed"] for s in sets)
    assert all(s["actual_weight"] is None and s["planned_weight"] == 0 for s in sets)


def test_swap_exercise_starts_from_the_replacements_progression(client, auth, user, catalog):
    past = _session(user["id"], day="2026-02-27")
    for number in (1, 2, 3):
        _set(past, catalog["Incline Dumbbell Press"], number, completed=True, weight=30, reps=8,
             actual_weight=30, actual_reps=8)
    session = _session(user["id"])
    _set(session, catalog["Bench Press"], 1, weight=80, reps=8)

    client.post(f"/workouts/sessions/{session}/swap", headers=auth, json={"exercise_id": catalog["Bench Press"]})
    sets = fetch_rows("exercise_sets", session_id=session)
    assert [(s["exercise_id"], s["planned_weight"]) for s in sets] == [(catalog["Incline Dumbbell Press"], 32.5)]


def test_delete_session_cascades(client, auth, user, catalog, meals):
    session = _session(user["id"])
    _set(session, catalog["Squat"], 1)
    insert_row("daily_meals", session_id=session, meal_id=meals["Oatmeal Bowl"], meal_type="breakfast",
               sort_order=0, completed=False)

    assert client.delete(f"/workouts/sessions/{session}", headers=auth).json()["success"] is True
    assert fetch_rows("workout_sessions") == []
    assert fetch_rows("exercise_sets") == []
    assert fetch_rows("daily_meals") == []


def test_cannot_edit_another_users_session(client, auth, catalog):
    other = insert_row("users", external_id="other", name="", email="", injuries="[]")
    session = _session(other)
    response = client.delete(f"/workouts/sessions/{session}", headers=auth)
    assert response.json()["success"] is False
    assert len(fetch_rows("workout_sessions")) == 1


# --- Queries ---

def test_upcoming_and_history(client, auth, user, catalog):
    past = _session(user["id"], day="2026-02-25")
    _set(past, catalog["Squat"], 1, completed=True)
    _set(past, catalog["Squat"], 2)
    _session(user["id"], day="2026-02-27")
    _session(user["id"], day="2026-03-04")
    _session(user["id"], day="2026-03-15")

    upcoming = client.get(f"/workouts/upcoming?date={DAY}", headers=auth).json()["data"]
    assert [s["date"] for s in upcoming] == ["2026-03-04"]

    history = client.get(f"/workouts/history?date={DAY}", headers=auth).json()["data"]
    assert [s["date"] for s in history] == ["2026-02-27", "2026-02-25"]
    assert history[0]["completion_rate"] == 0
    assert (history[1]["completed_sets"], history[1]["total_sets"], history[1]["completion_rate"]) == (1, 2, 0.5)


def test_today_without_session(client, auth):
    response = client.get(f"/workouts/today?date={DAY}", headers=auth)
    assert response.json() == {"success": True, "data": None, "error": None}
