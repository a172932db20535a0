# services/progress.py
from datetime import date, datetime, timedelta, timezone

from fitcoach.core.exceptions import NotFoundError
from fitcoach.crud import exercise as exercise_crud
from fitcoach.crud import goal as goal_crud
from fitcoach.crud import tracking as tracking_crud
from fitcoach.crud import workout as workout_crud
from fitcoach.services.matching import best_match
from fitcoach.services.projection import project_progress
from fitcoach.services.workout_editing import summarize_sets

KM_TO_MILES = 0.621371
KG_TO_LBS = 2.20462
MAX_PROGRESS_POINTS = 30
ALL_TIME = ("0001-01-01", "9999-12-31")


def _set_weight(set_row: dict) -> float:
    weight = set_row.get("actual_weight")
    return float(weight if weight is not None else set_row.get("planned_weight") or 0)


def compute_weekly_volume(sets: list[dict], week_start: date) -> dict:
    """Completion and tonnage for one week of set rows carrying ``body_part``."""
    completed = [s for s in sets if s["completed"]]
    by_part: dict[str, dict] = {}
    for set_row in completed:
        entry = by_part.setdefault(set_row["body_part"], {"body_part": set_row["body_part"], "total_sets": 0, "total_volume": 0.0})
        reps = set_row["actual_reps"] if set_row.get("actual_reps") is not None else set_row["planned_reps"]
        entry["total_sets"] += 1
        entry["total_volume"] += _set_weight(set_row) * reps

    summary = summarize_sets(sets)
    return {
        "week_start": week_start.isoformat(),
        **summary,
        "tonnage": sum(part["total_volume"] for part in by_part.values()),
        "body_parts": sorted(by_part.values(), key=lambda part: part["total_sets"], reverse=True),
    }


async def weekly_volume(user: dict, day: date) -> dict:
    week_start = day - timedelta(days=day.weekday())
    sets = await workout_crud.get_sets_in_range(
        user["id"], week_start.isoformat(), (week_start + timedelta(days=6)).isoformat()
    )
    return compute_weekly_volume(sets, week_start)


async def body_part_volume(user: dict, start: date, end: date) -> list[dict]:
    sets = await workout_crud.get_sets_in_range(user["id"], start.isoformat(), end.isoformat())
    return compute_weekly_volume(sets, start)["body_parts"]


async def exercise_progress(user: dict, exercise_id: int, target: float | None = None) -> dict:
    exercise = await exercise_crud.get_exercise(exercise_id)
    if exercise is None:
        raise NotFoundError(f"Exercise {exercise_id} not found")
    history = await workout_crud.get_max_weight_history(user["id"], exercise_id)
    points = [(row["date"], row["value"]) for row in history]
    return {
        "exercise": exercise,
        "points": [{"date": day, "value": value} for day, value in points],
        "projection": project_progress(points, target=target),
    }


async def latest_weights(user: dict) -> list[dict]:
    """Latest heaviest completed weight and session count for every exercise the user has trained."""
    sets = await workout_crud.get_sets_in_range(user["id"], *ALL_TIME)
    progress: dict[int, dict] = {}
    for set_row in sets:
        if not set_row["completed"]:
            continue
        entry = progress.setdefault(set_row["exercise_id"], {
            "exercise_id": set_row["exercise_id"],
            "name": set_row["exercise_name"],
            "body_part": set_row["body_part"],
            "latest_weight": 0.0,
            "sessions": 0,
            "_dates": {},
        })
        best = entry["_dates"].get(set_row["date"], 0.0)
        entry["_dates"][set_row["date"]] = max(best, _set_weight(set_row))

    result = []
    for entry in progress.values():
        dates = entry.pop("_dates")
        entry["sessions"] = len(dates)
        entry["latest_weight"] = dates[max(dates)]
        result.append(entry)
    return sorted(result, key=lambda entry: entry["name"])


def _goal_start(goal: dict) -> date:
    created = goal.get("created_at")
    if isinstance(created, str):
        created = datetime.fromisoformat(created)
    if isinstance(created, datetime):
        return created.date()
    return date.today()


async def goal_progress(user: dict) -> dict | None:
    goal = await goal_crud.get_active_goal(user["id"])
    if goal is None:
        return None

    start = _goal_start(goal)
    target = goal.get("target") or {}
    unit = goal.get("unit") or ""
    current, start_value, series = None, None, []

    if goal["category"] == "strength" and target.get("exercise"):
        catalog = await exercise_crud.list_exercises()
        exercise = best_match(target["exercise"], catalog, key=lambda e: e["name"], min_score=1.5)
        if exercise is not None:
            history = await workout_crud.get_max_weight_history(user["id"], exercise["id"])
            series = [{"date": row["date"], "value": row["value"]} for row in history]
            if series:
                current = max(point["value"] for point in series)
        unit = unit or "kg"

    elif goal["category"] == "endurance":
        to_unit = KM_TO_MILES if "mile" in unit.lower() else 1.0
        rows = await tracking_crud.get_distance_entries_since(user["id"], start.isoformat())
        series = [{"date": row["date"], "value": row["distance_km"] * to_unit} for row in rows]
        current = sum(point["value"] for point in series)
        unit = unit or "km"

    elif goal["category"] == "body_composition":
        to_unit = KG_TO_LBS if "lb" in unit.lower() else 1.0
        rows = await tracking_crud.get_weight_entries_since(user["id"], start.isoformat())
        series = [{"date": row["date"], "value": row["weight_kg"] * to_unit} for row in rows]
        if series:
            current = series[-1]["value"]
        elif user.get("weight_kg"):
            current = user["weight_kg"] * to_unit
        start_value = user["weight_kg"] * to_unit if user.get("weight_kg") else current
        unit = unit or "kg"

    target_value = goal.get("value")
    percent = 0.0
    if current is not None and target_value:
        if goal["category"] == "body_composition" and start_value is not None:
            if goal.get("direction") == "decrease":
                percent = (start_value - current) / target_value * 100
                target_value = start_value - target_value
            elif goal.get("direction") == "increase":
                percent = (current - start_value) / target_value * 100
                target_value = start_value + target_value
            else:
                total = abs(target_value - start_value)
                percent = abs(current - start_value) / total * 100 if total else 0.0
        elif goal["category"] in ("strength", "endurance"):
            percent = current / target_value * 100

    return {
        "goal_id": goal["id"],
        "category": goal["category"],
        "current_value": current,
        "target_value": target_value,
        "start_value": start_value,
        "unit": unit,
        "progress_percent": min(100.0, max(0.0, percent)),
        "days_elapsed": (datetime.now(timezone.utc).date() - start).days,
        "progress_data": series[-MAX_PROGRESS_POINTS:],
    }
