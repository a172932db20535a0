# services/workout_editing.py
import logging
from datetime import date, timedelta

from fitcoach.core.exceptions import ConflictError, DomainError, NotFoundError
from fitcoach.crud import blocked as blocked_crud
from fitcoach.crud import exercise as exercise_crud
from fitcoach.crud import meal as meal_crud
from fitcoach.crud import workout as workout_crud
from fitcoach.schemas.workout import CompleteSetRequest
from fitcoach.services.matching import same_body_part
from fitcoach.services.progression import compute_progression

logger = logging.getLogger(__name__)

UPCOMING_DAYS = 7
HISTORY_DAYS = 14
ACCESSORY_SETS = 3
ACCESSORY_REPS = 12


# --- Pure helpers ---

def plan_volume_reduction(sets: list[dict], mode: str) -> list[int]:
    """Ids of the sets to delete.

    ``remove_set`` drops the highest-numbered set of every exercise;
    ``remove_exercise`` drops every set of the exercise with the most sets
    (first seen wins a tie) and fails on an empty session.
    """
    by_exercise: dict[int, list[dict]] = {}
    for set_row in sets:
        by_exercise.setdefault(set_row["exercise_id"], []).append(set_row)

    if mode == "remove_set":
        return [max(group, key=lambda s: s["set_number"])["id"] for group in by_exercise.values()]

    if mode == "remove_exercise":
        if not by_exercise:
            raise DomainError("This workout has no exercises to remove")
        largest = None
        for group in by_exercise.values():
            if largest is None or len(group) > len(largest):
                largest = group
        return [s["id"] for s in largest]

    raise DomainError(f"Unknown volume reduction mode: {mode}")


def summarize_sets(sets: list[dict]) -> dict:
    total = len(sets)
    completed = sum(1 for s in sets if s["completed"])
    return {
        "completed_sets": completed,
        "total_sets": total,
        "completion_rate": completed / total if total else 0,
    }


# --- Ownership ---

async def get_owned_session(user: dict, session_id: int) -> dict:
    session = await workout_crud.get_session(session_id)
    if session is None or session["user_id"] != user["id"]:
        raise NotFoundError(f"Workout session {session_id} not found")
    return session


async def _owned_set(user: dict, set_id: int) -> dict:
    set_row = await workout_crud.get_set(set_id)
    if set_row is not None:
        session = await workout_crud.get_session(set_row["session_id"])
        if session is not None and session["user_id"] == user["id"]:
            return set_row
    raise NotFoundError(f"Exercise set {set_id} not found")


# --- Mutations ---

async def complete_set(user: dict, set_id: int, request: CompleteSetRequest) -> dict:
    await _owned_set(user, set_id)
    return await workout_crud.update_set_completion(
        set_id, request.actual_weight, request.actual_reps, request.actual_rpe, request.completed
    )


async def reduce_volume(user: dict, session_id: int, mode: str) -> int:
    await get_owned_session(user, session_id)
    sets = await workout_crud.get_sets_for_session(session_id)
    to_delete = plan_volume_reduction(sets, mode)
    await workout_crud.delete_sets(to_delete)
    logger.info("Reduced session %s (%s): %d sets removed", session_id, mode, len(to_delete))
    return len(to_delete)


async def move_session(user: dict, session_id: int, new_date: date) -> dict:
    session = await get_owned_session(user, session_id)
    target = new_date.isoformat()
    if session["date"] == target:
        return session
    if await workout_crud.other_session_on_date(user["id"], target, session_id):
        raise ConflictError(f"A workout already exists on {target}; move or delete it first")
    await workout_crud.update_session_date(session_id, target, new_date.strftime("%A"))
    return await workout_crud.get_session(session_id)


async def delete_session(user: dict, session_id: int):
    await get_owned_session(user, session_id)
    await workout_crud.delete_session(session_id)


async def _candidates_for_body_part(user_id: int, body_part: str) -> list[dict]:
    blocked_ids = await blocked_crud.get_blocked_ids(user_id, "exercise")
    return [
        exercise for exercise in await exercise_crud.list_exercises()
        if exercise["id"] not in blocked_ids and same_body_part(exercise["body_part"], body_part)
    ]


async def add_accessory(user: dict, body_part: str, count: int = 1, reference_date: date | None = None) -> list[dict]:
    """Append an accessory for ``body_part`` to up to ``count`` sessions in the coming week."""
    reference_date = reference_date or date.today()
    candidates = await _candidates_for_body_part(user["id"], body_part)
    if not candidates:
        raise NotFoundError(f"No exercises available for body part '{body_part}'")

    sessions = await workout_crud.get_sessions_in_range(
        user["id"], reference_date.isoformat(), (reference_date + timedelta(days=UPCOMING_DAYS)).isoformat()
    )
    if not sessions:
        raise NotFoundError("No upcoming workouts in the next 7 days")

    added = []
    for session in sessions[:count]:
        in_session = {s["exercise_id"] for s in await workout_crud.get_sets_for_session(session["id"])}
        exercise = next((e for e in candidates if e["id"] not in in_session), candidates[0])
        start = await workout_crud.get_max_set_number(session["id"], exercise["id"])
        for set_number in range(start + 1, start + ACCESSORY_SETS + 1):
            await workout_crud.insert_set(session["id"], exercise["id"], set_number, 0, ACCESSORY_REPS)
        added.append({"session_id": session["id"], "date": session["date"], "exercise": exercise["name"]})
    logger.info("Added %s accessory to %d sessions for user %s", body_part, len(added), user["id"])
    return added


async def swap_exercise(user: dict, session_id: int, exercise_id: int) -> dict:
    """Replace one exercise's sets with new sets of an unused, non-blocked exercise of the same body part."""
    session = await get_owned_session(user, session_id)
    sets = await workout_crud.get_sets_for_session(session_id)
    if not any(s["exercise_id"] == exercise_id for s in sets):
        raise NotFoundError(f"Exercise {exercise_id} is not part of this workout")

    current = await exercise_crud.get_exercise(exercise_id)
    in_session = {s["exercise_id"] for s in sets}
    candidates = [
        e for e in await _candidates_for_body_part(user["id"], current["body_part"])
        if e["id"] not in in_session
    ]
    if not candidates:
        raise ConflictError(f"No alternative {current['body_part']} exercise is available")

    replacement = candidates[0]
    history = await workout_crud.get_recent_exercise_sessions(user["id"], replacement["id"], before_date=session["date"])
    planned_reps = next(s["planned_reps"] for s in sets if s["exercise_id"] == exercise_id)
    weight, _ = compute_progression(history, planned_reps)
    await workout_crud.replace_exercise_in_session(session_id, exercise_id, replacement["id"], weight)
    logger.info("Swapped %s for %s in session %s", current["name"], replacement["name"], session_id)
    return {"removed": current, "added": replacement}


# --- Queries ---

async def _with_details(sessions: list[dict]) -> list[dict]:
    sets_by_session = await workout_crud.get_sets_for_sessions(s["id"] for s in sessions)
    exercises = await exercise_crud.get_exercises_by_ids(
        s["exercise_id"] for sets in sets_by_session.values() for s in sets
    )
    detailed = []
    for session in sessions:
        sets = [{**s, "exercise": exercises.get(s["exercise_id"])} for s in sets_by_session.get(session["id"], [])]
        detailed.append({**session, "sets": sets})
    return detailed


async def get_workout_for_date(user: dict, session_date: date) -> dict | None:
    session = await workout_crud.get_session_by_date(user["id"], session_date.isoformat())
    if session is None:
        return None
    detailed = (await _with_details([session]))[0]
    meals = []
    for daily_meal in await meal_crud.get_daily_meals(session["id"]):
        meals.append({**daily_meal, "meal": await meal_crud.get_meal(daily_meal["meal_id"])})
    detailed["meals"] = meals
    return detailed


async def get_session_detail(user: dict, session_id: int) -> dict:
    session = await get_owned_session(user, session_id)
    return (await _with_details([session]))[0]


async def get_upcoming(user: dict, reference_date: date) -> list[dict]:
    sessions = await workout_crud.get_sessions_in_range(
        user["id"], reference_date.isoformat(), (reference_date + timedelta(days=UPCOMING_DAYS)).isoformat()
    )
    return await _with_details(sessions)


async def get_history(user: dict, reference_date: date) -> list[dict]:
    sessions = await workout_crud.get_sessions_in_range(
        user["id"],
        (reference_date - timedelta(days=HISTORY_DAYS)).isoformat(),
        reference_date.isoformat(),
        descending=True,
    )
    sets_by_session = await workout_crud.get_sets_for_sessions(s["id"] for s in sessions)
    return [
        {
            "id": session["id"],
            "date": session["date"],
            "intensity": session["intensity"],
            "workout_type": session["workout_type"],
            "focus": session["focus"],
            **summarize_sets(sets_by_session.get(session["id"], [])),
        }
        for session in sessions
    ]
