# services/primary_lifts.py
"""Approved primary lifts for strength goals and the muscles that support them."""

from typing import Iterable, Optional

from fitcoach.services.matching import CONTAINS, best_match, normalize_name

PRIMARY_LIFT_SUPPORTING_MUSCLES: dict[str, list[str]] = {
    # Upper push
    "bench press": ["chest", "triceps", "front delts"],
    "incline dumbbell press": ["chest", "triceps", "front delts"],
    "chest press": ["chest", "triceps", "front delts"],
    "dumbbell chest press": ["chest", "triceps", "front delts"],
    "dips": ["triceps", "chest", "front delts"],
    "push-ups": ["chest", "triceps", "front delts"],
    "push ups": ["chest", "triceps", "front delts"],
    "shoulder press": ["front delts", "triceps", "lateral delts"],
    "incline dumbbell chest press": ["chest", "triceps", "front delts"],
    "chest cable fly": ["chest", "front delts"],
    # Upper pull
    "pull-ups": ["lats", "biceps", "upper back", "rear delts"],
    "pull ups": ["lats", "biceps", "upper back", "rear delts"],
    "chin-ups": ["lats", "biceps", "upper back", "rear delts"],
    "chin ups": ["lats", "biceps", "upper back", "rear delts"],
    "lat pulldown": ["lats", "biceps", "upper back"],
    "barbell row": ["upper back", "lats", "biceps", "rear delts"],
    "dumbbell row": ["upper back", "lats", "biceps", "rear delts"],
    "seated cable row": ["upper back", "lats", "biceps", "rear delts"],
    # Lower body
    "squat": ["quads", "glutes", "hamstrings"],
    "deadlift": ["hamstrings", "glutes", "lower back"],
    "romanian deadlift": ["hamstrings", "glutes", "lower back"],
    "rdl": ["hamstrings", "glutes", "lower back"],
    "leg press": ["quads", "glutes"],
    "split squat": ["quads", "glutes"],
    "bulgarian split squat": ["quads", "glutes"],
    # Arms (secondary strength goals only)
    "barbell curl": ["biceps", "forearms"],
    "dumbbell curl": ["biceps", "forearms"],
    # Core
    "plank": ["abs", "obliques"],
    "sit-ups": ["abs", "obliques"],
    "sit ups": ["abs", "obliques"],
}

PRIMARY_LIFTS: list[str] = list(PRIMARY_LIFT_SUPPORTING_MUSCLES)


def _contains_either_way(a: str, b: str) -> bool:
    return a in b or b in a


def is_primary_lift(name: Optional[str]) -> bool:
    normalized = normalize_name(name)
    if not normalized:
        return False
    if normalized in PRIMARY_LIFT_SUPPORTING_MUSCLES:
        return True
    return any(_contains_either_way(normalized, lift) for lift in PRIMARY_LIFTS)


def find_matching_primary_lift(name: Optional[str]) -> Optional[str]:
    """Canonical primary lift for ``name``, or None when no lift contains it or is contained by it."""
    normalized = normalize_name(name)
    if not normalized:
        return None
    if normalized in PRIMARY_LIFT_SUPPORTING_MUSCLES:
        return normalized
    return best_match(normalized, PRIMARY_LIFTS, min_score=CONTAINS - 0.5)


def suggest_primary_lift(name: Optional[str]) -> Optional[str]:
    """Nearest primary lift by any positive score, used for error suggestions."""
    return best_match(name, PRIMARY_LIFTS)


def get_supporting_muscle_groups(name: Optional[str]) -> list[str]:
    lift = find_matching_primary_lift(name)
    if lift is None:
        return []
    return list(PRIMARY_LIFT_SUPPORTING_MUSCLES[lift])


def validate_primary_lift_for_goal(catalog_names: Iterable[str], name: Optional[str]) -> dict:
    """Check a strength-goal target against the exercise catalog.

    A blank name is an "overall strength" goal and is always valid. Otherwise the
    name must resolve to a catalog exercise whose own name is a primary lift.
    Returns ``{"is_valid", "error", "suggestion"}``.
    """
    if name is None or not name.strip():
        return {"is_valid": True, "error": None, "suggestion": None}

    matched = best_match(name, list(catalog_names), min_score=CONTAINS - 0.5)
    if matched is None:
        return {
            "is_valid": False,
            "error": (
                f'Exercise "{name}" not found in exercise database. '
                "Please select an exercise from the available exercises."
            ),
            "suggestion": suggest_primary_lift(name),
        }

    if not is_primary_lift(matched):
        suggestion = suggest_primary_lift(matched)
        if suggestion:
            error = (
                f'"{name}" is not an approved PRIMARY LIFT for strength goals. '
                f'Did you mean "{suggestion}"?'
            )
        else:
            error = (
                f'"{name}" is not an approved PRIMARY LIFT for strength goals. '
                "Strength goals can only target approved primary lifts such as: "
                "bench press, squat, deadlift, pull-ups, barbell row."
            )
        return {"is_valid": False, "error": error, "suggestion": suggestion}

    return {"is_valid": True, "error": None, "suggestion": None}
