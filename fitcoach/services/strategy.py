# services/strategy.py
"""Free-text goal + profile -> training strategy and diet plan."""

import logging
import math
import re

from fitcoach.core.exceptions import GenerationError
from fitcoach.schemas.plan import DietMeal, DietPlan, ProfileSnapshot, TrainingStrategy
from fitcoach.schemas.user import has_equipment
from fitcoach.services.primary_lifts import PRIMARY_LIFTS, PRIMARY_LIFT_SUPPORTING_MUSCLES
from fitcoach.services.matching import normalize_name
from fitcoach.utils import openai_client

logger = logging.getLogger(__name__)

DEFAULT_TIME_HORIZON_WEEKS = 12
SPLIT_TYPES = ("PPL", "UPPER_LOWER", "FULL_BODY", "BRO_SPLIT", "PUSH_PULL_LEGS_ARMS")
REQUIRED_STRATEGY_KEYS = ("goal_type", "primary_focus")

# First match wins.
GOAL_CATEGORY_KEYWORDS = [
    (("lose", "fat", "weight", "cut"), "body_composition", "decrease"),
    (("strength", "strong", "power", "lift"), "strength", "increase"),
    (("endurance", "cardio", "run", "marathon"), "endurance", "increase"),
    (("mobility", "flexibility"), "mobility", "increase"),
    (("skill", "technique"), "skill", "achieve"),
]

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_TARGET_NUMBER = re.compile(r"(\d+(?:\.\d+)?)\s*(kg|kgs|lbs?|pounds|reps?)?", re.IGNORECASE)


def _supporting_muscles_table() -> str:
    return "\n".join(
        f"    - {lift}: {', '.join(muscles)}" for lift, muscles in PRIMARY_LIFT_SUPPORTING_MUSCLES.items()
    )


def describe_profile(profile: ProfileSnapshot | None) -> str:
    if profile is None:
        return "- No profile information provided"
    equipment = "available" if has_equipment(profile.equipment_access) else "none (bodyweight only)"
    return (
        f"- Weight: {profile.weight_kg if profile.weight_kg is not None else 'unknown'} kg\n"
        f"- Height: {profile.height_cm if profile.height_cm is not None else 'unknown'} cm\n"
        f"- Experience: {profile.experience_level or 'unknown'}\n"
        f"- Equipment: {equipment}"
    )


def build_strategy_prompt(goal_text: str, profile: ProfileSnapshot | None) -> str:
    return f"""
    You are an expert strength and conditioning coach. Turn the user's goal into a high-level training strategy.

    [User goal]
    {goal_text}

    [User profile]
    {describe_profile(profile)}

    [Rules]
    1. If the goal names a specific lift with a numeric target (e.g. "bench 100kg"), that lift MUST appear in
       "training_priorities" at high frequency (2-3x per week), and its supporting muscle groups MUST be listed
       in "secondary_support". Supporting muscle groups per lift:
{_supporting_muscles_table()}
    2. If the goal mentions running or cardio, running MUST be a primary priority in "training_priorities",
       never secondary support.
    3. "intensity_distribution" values are fractions of weekly sessions (numbers between 0 and 1).
    4. "split_type" must be one of: {", ".join(SPLIT_TYPES)}.

    Respond with a single JSON object with exactly these keys:
    {{
      "goal_type": "strength | hypertrophy | fat_loss | endurance | general_fitness",
      "primary_focus": "short description",
      "time_horizon_weeks": 12,
      "training_priorities": ["..."],
      "secondary_support": ["..."],
      "recommended_frequency": {{"strength_sessions": 3, "cardio_sessions": 1}},
      "intensity_distribution": {{"heavy": 0.3, "moderate": 0.5, "light": 0.2}},
      "recovery_notes": "...",
      "split_type": "FULL_BODY",
      "program_overview": "2-3 sentence summary",
      "phases": [{{"name": "...", "weeks": "1-4", "goal": "...", "description": "..."}}]
    }}
    """


def build_diet_prompt(goal_text: str, profile: ProfileSnapshot | None, dietary_restrictions: str | None) -> str:
    return f"""
    You are a sports nutritionist. Create a one-day diet plan that supports the user's goal.

    [User goal]
    {goal_text}

    [User profile]
    {describe_profile(profile)}

    [Dietary restrictions]
    {dietary_restrictions or "none"}

    Respond with a single JSON object:
    {{"dailyCalories": 2200, "meals": [{{"name": "Breakfast", "foods": ["oats", "banana", "whey"]}}]}}
    """


def parse_int_prefix(text: str) -> int | None:
    """Leading integer of a string ("12 weeks" -> 12, "8.9" -> 8), or None."""
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else None


def parse_float_prefix(text: str) -> float | None:
    match = _FLOAT_PREFIX.match(text)
    return float(match.group(1)) if match else None


def coerce_time_horizon(value) -> int:
    if isinstance(value, bool):
        return DEFAULT_TIME_HORIZON_WEEKS
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else DEFAULT_TIME_HORIZON_WEEKS
    if isinstance(value, str):
        parsed = parse_int_prefix(value)
        return parsed if parsed is not None else DEFAULT_TIME_HORIZON_WEEKS
    return DEFAULT_TIME_HORIZON_WEEKS


def coerce_fraction(value) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if isinstance(value, str):
        parsed = parse_float_prefix(value)
        return parsed if parsed is not None and math.isfinite(parsed) else 0.0
    return 0.0


def _coerce_phases(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    phases = []
    for phase in value:
        if not isinstance(phase, dict):
            continue
        phases.append({key: str(phase.get(key) or "") for key in ("name", "weeks", "goal", "description")})
    return phases


def validate_training_strategy(raw) -> TrainingStrategy:
    """Normalize a generated strategy. Missing required keys are fatal."""
    if not isinstance(raw, dict):
        raise GenerationError("Training strategy must be a JSON object")
    missing = [key for key in REQUIRED_STRATEGY_KEYS if not raw.get(key)]
    if missing:
        raise GenerationError(f"Training strategy is missing required keys: {', '.join(missing)}")

    distribution = raw.get("intensity_distribution")
    if not isinstance(distribution, dict):
        distribution = {}
    split_type = raw.get("split_type")

    return TrainingStrategy(
        goal_type=str(raw["goal_type"]),
        primary_focus=str(raw["primary_focus"]),
        time_horizon_weeks=coerce_time_horizon(raw.get("time_horizon_weeks")),
        training_priorities=raw["training_priorities"] if isinstance(raw.get("training_priorities"), list) else [],
        secondary_support=raw["secondary_support"] if isinstance(raw.get("secondary_support"), list) else [],
        recommended_frequency=(
            raw["recommended_frequency"] if isinstance(raw.get("recommended_frequency"), dict) else {}
        ),
        intensity_distribution={
            "heavy": coerce_fraction(distribution.get("heavy")),
            "moderate": coerce_fraction(distribution.get("moderate")),
            "light": coerce_fraction(distribution.get("light")),
        },
        recovery_notes="" if raw.get("recovery_notes") is None else str(raw.get("recovery_notes")),
        split_type=split_type if split_type in SPLIT_TYPES else None,
        program_overview=str(raw.get("program_overview") or ""),
        phases=_coerce_phases(raw.get("phases")),
    )


def transform_diet_plan(raw) -> DietPlan:
    """Keep only dailyCalories and each meal's name/foods; split calories evenly."""
    if not isinstance(raw, dict):
        raise GenerationError("Diet plan must be a JSON object")
    daily_calories = raw.get("dailyCalories")
    if isinstance(daily_calories, str):
        daily_calories = parse_float_prefix(daily_calories)
    if isinstance(daily_calories, bool) or not isinstance(daily_calories, (int, float)):
        raise GenerationError("Diet plan is missing a numeric dailyCalories")

    raw_meals = raw.get("meals") if isinstance(raw.get("meals"), list) else []
    trimmed = []
    for index, meal in enumerate(raw_meals):
        if not isinstance(meal, dict):
            continue
        foods = meal.get("foods") if isinstance(meal.get("foods"), list) else []
        trimmed.append({"name": str(meal.get("name") or f"Meal {index + 1}"), "foods": [str(f) for f in foods]})

    if not trimmed:
        return DietPlan(dailyCalories=daily_calories, meals=[])

    per_meal = math.floor(daily_calories / len(trimmed))
    meals = [
        DietMeal(
            name=meal["name"],
            foods=meal["foods"],
            calories=per_meal,
            instructions=[f"Prepare {meal['name'].lower()} with {', '.join(meal['foods']) or 'the listed foods'}."],
        )
        for meal in trimmed
    ]
    return DietPlan(dailyCalories=daily_calories, meals=meals)


def infer_goal_category(goal_text: str) -> tuple[str, str]:
    """(category, direction) from keywords in the goal text."""
    lowered = goal_text.lower()
    for keywords, category, direction in GOAL_CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category, direction
    return "body_composition", "increase"


def extract_lift_target(goal_text: str) -> tuple[str | None, float | None, str | None]:
    """(primary lift, number, unit) named in the goal text, longest lift name first."""
    normalized = normalize_name(goal_text)
    lifts = sorted((lift for lift in PRIMARY_LIFTS if lift in normalized), key=len, reverse=True)
    numbers = list(_TARGET_NUMBER.finditer(normalized))
    # "in 12 weeks bench 100kg": the number carrying a unit is the target
    match = next((m for m in numbers if m.group(2)), numbers[0] if numbers else None)
    if not lifts or match is None:
        return None, None, None
    unit = (match.group(2) or "kg").lower()
    if unit in ("lb", "pounds"):
        unit = "lbs"
    elif unit in ("kgs",):
        unit = "kg"
    elif unit.startswith("rep"):
        unit = "reps"
    return lifts[0], float(match.group(1)), unit


async def generate_training_strategy(goal_text: str, profile: ProfileSnapshot | None) -> TrainingStrategy:
    raw = await openai_client.generate_json(
        [
            {"role": "system", "content": build_strategy_prompt(goal_text, profile)},
            {"role": "user", "content": goal_text},
        ],
        temperature=0.3,
    )
    strategy = validate_training_strategy(raw)
    logger.info("Generated %s strategy over %d weeks", strategy.goal_type, strategy.time_horizon_weeks)
    return strategy


async def generate_diet_plan(
    goal_text: str, profile: ProfileSnapshot | None, dietary_restrictions: str | None = None
) -> DietPlan:
    raw = await openai_client.generate_json(
        [
            {"role": "system", "content": build_diet_prompt(goal_text, profile, dietary_restrictions)},
            {"role": "user", "content": goal_text},
        ],
        temperature=0.3,
    )
    return transform_diet_plan(raw)
