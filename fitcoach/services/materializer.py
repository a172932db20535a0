# services/materializer.py
"""Turns a generated day plan into a persisted session with concrete sets."""

import logging
from datetime import date, timedelta

from fitcoach.core.exceptions import GenerationError
from fitcoach.crud import blocked as blocked_crud
from fitcoach.crud import exercise as exercise_crud
from fitcoach.crud import goal as goal_crud
from fitcoach.crud import plan as plan_crud
from fitcoach.crud import workout as workout_crud
from fitcoach.schemas.workout import DailyPlanOutput
from fitcoach.services import daily_planner, nutrition
from fitcoach.services.matching import best_match, same_body_part
from fitcoach.services.progression import apply_volume_ceilings, compute_progression

logger = logging.getLogger(__name__)

# token-overlap matches below this are treated as unresolved
MIN_RESOLVE_SCORE = 0.5


def resolve_exercises(plan: DailyPlanOutput, catalog: list[dict]) -> list[dict]:
    """Map each planned exercise onto a distinct catalog exercise.

    Unresolved names fall back to an unused exercise of the same body part; if
    there is none the entry is skipped.
    """
    used_ids = set()
    resolved = []
    for planned in plan.exercises:
        unused = [exercise for exercise in catalog if exercise["id"] not in used_ids]
        match = best_match(planned.name, unused, key=lambda exercise: exercise["name"], min_score=MIN_RESOLVE_SCORE)
        if match is None and planned.body_part:
            match = next((e for e in unused if same_body_part(e["body_part"], planned.body_part)), None)
            if match is not None:
                logger.info("Exercise %r not in catalog, using %r instead", planned.name, match["name"])
        if match is None:
            logger.warning("Skipping unresolved exercise %r (%s)", planned.name, planned.body_part)
            continue
        used_ids.add(match["id"])
        resolved.append({"exercise": match, "sets": planned.sets, "reps": planned.reps})
    return resolved


def iso_week_bounds(day: date) -> tuple[date, date]:
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


async def materialize_daily_plan(
    user: dict,
    plan_output: DailyPlanOutput,
    session_date: date,
    plan: dict | None = None,
    goal: dict | None = None,
) -> int:
    """Persist the day's session, superseding anything already on that date. Returns the session id."""
    catalog = await exercise_crud.list_exercises()
    blocked_ids = await blocked_crud.get_blocked_ids(user["id"], "exercise")
    allowed = [exercise for exercise in catalog if exercise["id"] not in blocked_ids]

    resolved = resolve_exercises(plan_output, allowed)
    if not resolved:
        raise GenerationError("None of the generated exercises could be matched to the exercise catalog")

    week_start, week_end = iso_week_bounds(session_date)
    weekly_counts = await workout_crud.count_sets_by_body_part(
        user["id"], week_start.isoformat(), week_end.isoformat(), exclude_date=session_date.isoformat()
    )
    capped = apply_volume_ceilings(resolved, weekly_counts)
    if not capped:
        raise GenerationError("Weekly volume ceilings leave no room for this session")

    planned_sets = []
    for item in capped:
        exercise = item["exercise"]
        history = await workout_crud.get_recent_exercise_sessions(
            user["id"], exercise["id"], before_date=session_date.isoformat()
        )
        weight, reps = compute_progression(history, item["reps"])
        for set_number in range(1, item["sets"] + 1):
            planned_sets.append({
                "exercise_id": exercise["id"],
                "set_number": set_number,
                "planned_weight": weight,
                "planned_reps": reps,
            })

    session = {
        "plan_id": plan["id"] if plan else None,
        "goal_id": goal["id"] if goal else None,
        "date": session_date.isoformat(),
        "week_number": session_date.isocalendar()[1],
        "day_of_week": session_date.strftime("%A"),
        "intensity": plan_output.intensity,
        "workout_type": "main",
        "focus": plan_output.focus or ", ".join(plan_output.body_parts),
        "notes": plan_output.notes,
    }
    session_id = await workout_crud.replace_session_for_date(user["id"], session, planned_sets)
    logger.info(
        "Materialized session %s for user %s on %s with %d sets",
        session_id, user["id"], session_date, len(planned_sets),
    )
    await nutrition.assign_daily_meals(user, session_id, goal)
    return session_id


async def recent_workout_summaries(user_id: int, before: date, limit: int = 3) -> list[dict]:
    """Last sessions before a date as {intensity, body_parts}, oldest first."""
    sessions = await workout_crud.get_recent_sessions(user_id, before.isoformat(), limit)
    sets_by_session = await workout_crud.get_sets_for_sessions(s["id"] for s in sessions)
    exercises = await exercise_crud.get_exercises_by_ids(
        s["exercise_id"] for sets in sets_by_session.values() for s in sets
    )
    summaries = []
    for session in reversed(sessions):
        body_parts = []
        for set_row in sets_by_session.get(session["id"], []):
            exercise = exercises.get(set_row["exercise_id"])
            if exercise and exercise["body_part"] not in body_parts:
                body_parts.append(exercise["body_part"])
        summaries.append({"intensity": session["intensity"], "body_parts": body_parts})
    return summaries


async def generate_daily_workout(user: dict, session_date: date) -> int:
    goal = await goal_crud.get_active_goal(user["id"])
    plan = await plan_crud.get_active_plan(user["id"])
    recent = await recent_workout_summaries(user["id"], session_date)
    intent = daily_planner.compute_workout_intent(goal, recent, user.get("injuries"))

    catalog = await exercise_crud.list_exercises()
    blocked_ids = await blocked_crud.get_blocked_ids(user["id"], "exercise")
    injured = set(intent["injured_body_parts"])
    exercises = daily_planner.allowed_exercises(catalog, blocked_ids, injured, intent["body_parts"])

    strategy = plan["training_strategy"] if plan else None
    plan_output = await daily_planner.generate_daily_plan(intent, exercises, strategy, session_date)
    return await materialize_daily_plan(user, plan_output, session_date, plan=plan, goal=goal)
