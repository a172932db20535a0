from datetime import date, datetime

import pytest

from conftest import insert_row
from fitcoach.services.progress import compute_weekly_volume


def _set_row(body_part, completed, weight=0, reps=10, actual_weight=None, actual_reps=None):
    return {
        "body_part": body_part, "completed": completed, "planned_weight": weight, "planned_reps": reps,
        "actual_weight": actual_weight, "actual_reps": actual_reps,
    }


def test_compute_weekly_volume():
    sets = [
        _set_row("chest", True, weight=60, reps=5),
        _set_row("chest", True, weight=60, reps=5, actual_weight=62.5, actual_reps=4),
        _set_row("quads", True, weight=100, reps=5),
        _set_row("quads", False, weight=100, reps=5),
        _set_row("biceps", False),
    ]
    result = compute_weekly_volume(sets, date(2026, 3, 2))
    assert result["week_start"] == "2026-03-02"
    assert (result["completed_sets"], result["total_sets"]) == (3, 5)
    assert result["completion_rate"] == pytest.approx(0.6)
    assert result["tonnage"] == pytest.approx(300 + 250 + 500)
    assert [part["body_part"] for part in result["body_parts"]] == ["chest", "quads"]
    assert result["body_parts"][0]["total_volume"] == pytest.approx(550)


def test_compute_weekly_volume_empty_week():
    result = compute_weekly_volume([], date(2026, 3, 2))
    assert (result["total_sets"], result["completion_rate"], result["tonnage"]) == (0, 0, 0)
    assert result["body_parts"] == []


def _completed_session(user_id, exercise_id, day, weights):
    session = insert_row("workout_sessions", user_id=user_id, date=day, intensity="moderate", workout_type="main")
    for number, weight in enumerate(weights, start=1):
        insert_row("exercise_sets", session_id=session, exercise_id=exercise_id, set_number=number,
                   planned_weight=weight, planned_reps=5, completed=True, actual_weight=weight, actual_reps=5)
    return session


def test_exercise_progress_and_projection(client, auth, user, catalog):
    bench = catalog["Bench Press"]
    _completed_session(user["id"], bench, "2026-03-02", [55, 60])
    _completed_session(user["id"], bench, "2026-03-09", [65, 62.5])

    data = client.get(f"/progress/exercises/{bench}?target=80", headers=auth).json()["data"]
    assert data["points"] == [{"date": "2026-03-02", "value": 60}, {"date": "2026-03-09", "value": 65}]
    projection = data["projection"]
    assert projection["current_weight"] == 65
    assert projection["weekly_gain"] == 5.0
    assert projection["weeks_to_target"] == 3


def test_exercise_progress_with_single_session_has_no_projection(client, auth, user, catalog):
    _completed_session(user["id"], catalog["Squat"], "2026-03-02", [100])
    data = client.get(f"/progress/exercises/{catalog['Squat']}", headers=auth).json()["data"]
    assert data["projection"] is None


def test_exercise_progress_unknown_exercise(client, auth):
    assert client.get("/progress/exercises/999", headers=auth).json()["success"] is False


def test_latest_weights(client, auth, user, catalog):
    _completed_session(user["id"], catalog["Squat"], "2026-03-02", [100, 105])
    _completed_session(user["id"], catalog["Squat"], "2026-03-05", [102.5])
    _completed_session(user["id"], catalog["Bench Press"], "2026-03-03", [70])

    data = client.get("/progress/exercises", headers=auth).json()["data"]
    assert [(e["name"], e["latest_weight"], e["sessions"]) for e in data] == [
        ("Bench Press", 70, 1),
        ("Squat", 102.5, 2),
    ]


def test_goal_progress_without_active_goal(client, auth):
    assert client.get("/progress/goal", headers=auth).json()["data"] is None


def test_goal_progress_weight_loss(client, auth, user):
    insert_row("goals", user_id=user["id"], category="body_composition", direction="decrease", value=5, unit="kg",
               is_active=True, completed=False, created_at=datetime(2026, 3, 1))
    for day, weight in (("2026-02-20", 81), ("2026-03-05", 79), ("2026-03-12", 78)):
        insert_row("daily_tracking", user_id=user["id"], date=day, water_intake=0, steps=0, weight_kg=weight)

    data = client.get("/progress/goal", headers=auth).json()["data"]
    assert data["start_value"] == 80
    assert data["current_value"] == 78
    assert data["target_value"] == 75
    assert data["progress_percent"] == pytest.approx(40)
    assert [point["date"] for point in data["progress_data"]] == ["2026-03-05", "2026-03-12"]


def test_goal_progress_strength(client, auth, user, catalog):
    insert_row("goals", user_id=user["id"], category="strength", direction="increase", value=100, unit="kg",
               target='{"exercise": "Bench Press", "metric": "weight"}',
               is_active=True, completed=False, created_at=datetime(2026, 3, 1))
    _completed_session(user["id"], catalog["Bench Press"], "2026-03-02", [70, 80])

    data = client.get("/progress/goal", headers=auth).json()["data"]
    assert data["current_value"] == 80
    assert data["progress_percent"] == pytest.approx(80)
    assert data["unit"] == "kg"


def test_weekly_volume_route(client, auth, user, catalog):
    _completed_session(user["id"], catalog["Squat"], "2026-03-04", [100])
    _completed_session(user["id"], catalog["Squat"], "2026-03-10", [100])
    data = client.get("/workouts/volume?date=2026-03-06", headers=auth).json()["data"]
    assert data["week_start"] == "2026-03-02"
    assert data["total_sets"] == 1
    assert data["tonnage"] == 500
