# services/daily_planner.py
"""One day's workout: intent from goal and recent history, then a constrained generation call."""

import json
import logging
import math
from datetime import date

from pydantic import ValidationError

from fitcoach.core.exceptions import GenerationError
from fitcoach.schemas.workout import DailyPlanOutput
from fitcoach.utils import openai_client

logger = logging.getLogger(__name__)

BODY_PARTS = [
    "chest",
    "upper back", "lats", "lower back", "traps",
    "front delts", "lateral delts", "rear delts", "shoulders",
    "biceps", "triceps", "forearms",
    "abs", "obliques", "core",
    "quads", "hamstrings", "glutes", "calves",
    "hip flexors", "inner thighs", "outer thighs", "outer hips",
    "ankles", "wrists",
    "neck",
    "cardio",
]

DEFAULT_BODY_PARTS = ["chest", "upper back", "shoulders"]

# (keywords, affected body parts)
INJURY_BODY_PARTS = [
    (("knee", "patella", "acl", "meniscus", "mcl", "pcl"), ["quads", "hamstrings", "calves"]),
    (("shoulder", "rotator", "deltoid", "ac joint", "impingement", "labrum"),
     ["front delts", "lateral delts", "rear delts", "upper back"]),
    (("back", "spine", "disc", "lumbar", "thoracic", "herniated"), ["upper back", "lower back", "lats"]),
    (("elbow", "golfer", "epicondylitis"), ["biceps", "triceps", "forearms"]),
    (("wrist", "hand", "carpal", "thumb", "finger"), ["forearms"]),
    (("ankle", "foot", "achilles", "plantar", "heel"), ["calves"]),
    (("hip", "groin", "it band", "iliotibial"), ["glutes", "quads", "hamstrings"]),
    (("neck", "cervical", "whiplash"), ["traps", "upper back"]),
    (("chest", "pectoral", "rib", "sternum"), ["chest"]),
    (("shin", "tibia", "fibula"), ["calves", "quads"]),
]

# category -> (intensity, compound sets, accessory sets)
GOAL_VOLUME = {
    "strength": ("heavy", 4, 2),
    "endurance": ("light", 3, 3),
    "body_composition": ("moderate", 3, 3),
    "mobility": ("light", 2, 2),
    "skill": ("light", 2, 2),
}
DEFAULT_VOLUME = ("moderate", 3, 2)

REP_RANGES = {
    "heavy": ("4-6", "8-10"),
    "moderate": ("8-10", "10-12"),
    "light": ("12-15", "15-20"),
}
ENDURANCE_REP_RANGES = ("15-20", "20-25")

ACTIVITY_FACTOR = 1.55
MIN_CALORIES = 1200


def map_injury_to_body_parts(injury: str) -> list[str]:
    lowered = (injury or "").lower()
    affected = []
    for keywords, parts in INJURY_BODY_PARTS:
        if any(keyword in lowered for keyword in keywords):
            affected.extend(part for part in parts if part not in affected)
    return affected


def injured_body_parts(injuries) -> set[str]:
    parts = set()
    for injury in injuries or []:
        parts.update(map_injury_to_body_parts(injury))
    return parts


def is_injured(body_part: str, injured: set[str]) -> bool:
    body_part = body_part.lower()
    return any(body_part == part or body_part in part or part in body_part for part in injured)


def check_fatigue(intensity: str, recent_workouts: list[dict]) -> str:
    """Three heavy sessions among the last three force a light day."""
    heavy_days = sum(1 for workout in recent_workouts[-3:] if workout.get("intensity") == "heavy")
    return "light" if heavy_days >= 3 else intensity


def rotate_body_parts(recent_workouts: list[dict]) -> list[str]:
    recent = set()
    for workout in recent_workouts[-3:]:
        recent.update(part.lower() for part in workout.get("body_parts", []))

    available = [part for part in BODY_PARTS if part not in recent]
    if len(available) >= 3:
        return available[:3]
    if available:
        return (available + [part for part in BODY_PARTS if part not in available])[:3]
    if recent_workouts:
        last_parts = {part.lower() for part in recent_workouts[-1].get("body_parts", [])}
        last_index = next((i for i, part in enumerate(BODY_PARTS) if part in last_parts), -1)
        return [BODY_PARTS[(last_index + offset) % len(BODY_PARTS)] for offset in (1, 2, 3)]
    return list(DEFAULT_BODY_PARTS)


def compute_workout_intent(goal: dict | None, recent_workouts: list[dict], injuries=None) -> dict:
    """Intensity, body parts, set counts and rep ranges for the next session.

    ``recent_workouts`` is oldest first; each item carries ``intensity`` and ``body_parts``.
    """
    category = goal.get("category") if goal else None
    intensity, compound_sets, accessory_sets = GOAL_VOLUME.get(category, DEFAULT_VOLUME)
    intensity = check_fatigue(intensity, recent_workouts)

    injured = injured_body_parts(injuries)
    body_parts = [part for part in rotate_body_parts(recent_workouts) if not is_injured(part, injured)]
    if not body_parts:
        body_parts = [part for part in BODY_PARTS if not is_injured(part, injured)][:3]

    compound_reps, accessory_reps = REP_RANGES[intensity]
    if category == "endurance":
        compound_reps, accessory_reps = ENDURANCE_REP_RANGES

    return {
        "intensity": intensity,
        "body_parts": body_parts,
        "compound_sets": compound_sets,
        "accessory_sets": accessory_sets,
        "rep_ranges": {"compound": compound_reps, "accessory": accessory_reps},
        "injured_body_parts": sorted(injured),
    }


def _round_half_up(value: float, step: float) -> float:
    return math.floor(value / step + 0.5) * step


def compute_nutrition_intent(goal: dict | None, profile: dict | None) -> dict:
    profile = profile or {}
    weight = profile.get("weight_kg") or 70
    height = profile.get("height_cm") or 175
    age = profile.get("age") or 30

    # Mifflin-St Jeor, male constant
    bmr = 10 * weight + 6.25 * height - 5 * age + 5
    tdee = bmr * ACTIVITY_FACTOR

    category = goal.get("category") if goal else None
    direction = goal.get("direction") if goal else None
    calorie_target, carb_bias, protein_per_kg = tdee, "moderate", 1.6
    if category == "body_composition" and direction == "decrease":
        calorie_target, carb_bias, protein_per_kg = tdee - 625, "low", 2.2
    elif category == "body_composition" and direction == "increase":
        calorie_target, carb_bias = tdee + 400, "high"
    elif category == "strength":
        calorie_target, protein_per_kg = tdee + 200, 2.0
    elif category == "endurance":
        calorie_target, carb_bias = tdee + 300, "high"

    return {
        "calorie_target": max(MIN_CALORIES, int(_round_half_up(calorie_target, 50))),
        "protein_min": int(_round_half_up(weight * protein_per_kg, 1)),
        "carb_bias": carb_bias,
    }


def allowed_exercises(catalog: list[dict], blocked_ids: set[int], injured: set[str], body_parts: list[str]) -> list[dict]:
    """Non-blocked, non-injured catalog exercises for today's body parts (all of them if none match)."""
    usable = [
        exercise for exercise in catalog
        if exercise["id"] not in blocked_ids and not is_injured(exercise["body_part"], injured)
    ]
    targeted = [
        exercise for exercise in usable
        if any(part in exercise["body_part"].lower() or exercise["body_part"].lower() in part for part in body_parts)
    ]
    return targeted or usable


def build_daily_plan_prompt(intent: dict, exercises: list[dict], strategy: dict | None, session_date: date) -> str:
    exercise_list = [
        {
            "name": exercise["name"],
            "body_part": exercise["body_part"],
            "is_compound": bool(exercise["is_compound"]),
            "equipment": exercise.get("equipment") or "bodyweight",
        }
        for exercise in exercises
    ]
    compound_count = 2 if intent["intensity"] == "heavy" else 3
    strategy_summary = "none"
    if strategy:
        strategy_summary = (
            f"goal type {strategy.get('goal_type')}, focus {strategy.get('primary_focus')}, "
            f"priorities {', '.join(str(p) for p in strategy.get('training_priorities') or []) or 'none'}"
        )

    return f"""
    You are a fitness coach generating the workout for {session_date.isoformat()} ({session_date.strftime("%A")}).
    You MUST follow these constraints exactly:

    CONSTRAINTS:
    1. Body parts to target: {", ".join(intent["body_parts"])}
    2. Intensity: {intent["intensity"]}
    3. Compound exercises: {compound_count} exercises, {intent["compound_sets"]} sets each
    4. Accessory exercises: {compound_count} exercises, {intent["accessory_sets"]} sets each
    5. Rep ranges: compound {intent["rep_ranges"]["compound"]}, accessory {intent["rep_ranges"]["accessory"]}
    6. Training strategy: {strategy_summary}

    ALLOWED EXERCISES (select ONLY from this list):
    {json.dumps(exercise_list, indent=2)}

    Return a JSON object with this exact structure:
    {{
      "focus": "short title for the session",
      "body_parts": ["..."],
      "intensity": "{intent["intensity"]}",
      "exercises": [{{"name": "exercise name", "body_part": "body part", "sets": 3, "reps": 10}}],
      "notes": "one or two sentences for the athlete"
    }}
    """


def parse_daily_plan(raw) -> DailyPlanOutput:
    if not isinstance(raw, dict):
        raise GenerationError("Daily plan must be a JSON object")
    exercises = raw.get("exercises")
    if not isinstance(exercises, list) or not exercises:
        raise GenerationError("Daily plan contains no exercises")

    normalized = []
    for item in exercises:
        if not isinstance(item, dict):
            raise GenerationError(f"Invalid exercise entry: {item!r}")
        entry = dict(item)
        if "name" not in entry and "exercise" in entry:
            entry["name"] = entry.pop("exercise")
        # a list of {weight, reps} sets collapses to a count and the first set's reps
        if isinstance(entry.get("sets"), list):
            sets = entry["sets"]
            entry["sets"] = len(sets)
            if sets and isinstance(sets[0], dict) and "reps" in sets[0] and "reps" not in item:
                entry["reps"] = sets[0]["reps"]
        normalized.append(entry)

    try:
        return DailyPlanOutput.model_validate({**raw, "exercises": normalized})
    except ValidationError as e:
        raise GenerationError(f"Invalid daily plan: {e}") from e


async def generate_daily_plan(
    intent: dict, exercises: list[dict], strategy: dict | None, session_date: date
) -> DailyPlanOutput:
    if not exercises:
        raise GenerationError(f"No allowed exercises found for body parts: {', '.join(intent['body_parts'])}")
    raw = await openai_client.generate_json(
        [{"role": "user", "content": build_daily_plan_prompt(intent, exercises, strategy, session_date)}],
        temperature=0.4,
    )
    plan = parse_daily_plan(raw)
    # fatigue and goal rules decide intensity, not the model
    plan.intensity = intent["intensity"]
    if not plan.body_parts:
        plan.body_parts = list(intent["body_parts"])
    logger.info("Daily plan for %s: %d exercises (%s)", session_date, len(plan.exercises), plan.intensity)
    return plan
