# services/progression.py
import math

from fitcoach.core.config import MAX_REPS_PER_SET, MAX_SETS_PER_EXERCISE, MAX_SETS_PER_SESSION, MAX_WEEKLY_SETS_PER_BODY_PART

WEIGHT_STEP = 2.5
LIGHT_WEIGHT_THRESHOLD = 50
PROGRESSION_RATE = 1.05
DELOAD_RATE = 0.9
DELOAD_EXTRA_REPS = 2


def round_weight(weight: float, step: float = WEIGHT_STEP) -> float:
    return math.floor(weight / step + 0.5) * step


def _weight(set_row: dict) -> float:
    weight = set_row.get("actual_weight")
    return float(weight if weight is not None else set_row.get("planned_weight") or 0)


def _reps(set_row: dict) -> int:
    reps = set_row.get("actual_reps")
    return int(reps if reps is not None else set_row.get("planned_reps") or 0)


def hit_all_targets(sets: list[dict]) -> bool:
    """Every set completed with at least its planned reps."""
    return bool(sets) and all(s.get("completed") and _reps(s) >= (s.get("planned_reps") or 0) for s in sets)


def compute_progression(history: list[list[dict]], planned_reps: int) -> tuple[float, int]:
    """Next (weight, reps) for an exercise.

    ``history`` holds the exercise's sets from its most recent sessions, newest first.
    Full success on the last session adds 5% (at least 2.5 kg below 50 kg); three
    sessions in a row with missed reps deload to 90% with two extra reps; anything
    else holds the weight.
    """
    if not history or not history[0]:
        return 0.0, planned_reps

    latest = history[0]
    completed = [s for s in latest if s.get("completed")]
    base = max((_weight(s) for s in completed), default=0.0)

    if len(history) >= 3 and not any(hit_all_targets(sets) for sets in history[:3]):
        return max(0.0, round_weight(base * DELOAD_RATE)), planned_reps + DELOAD_EXTRA_REPS

    if hit_all_targets(latest):
        if base < LIGHT_WEIGHT_THRESHOLD:
            next_weight = max(base + WEIGHT_STEP, base * PROGRESSION_RATE)
        else:
            next_weight = base * PROGRESSION_RATE
        return round_weight(next_weight), planned_reps

    return base, planned_reps


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def apply_volume_ceilings(planned: list[dict], weekly_counts: dict[str, int]) -> list[dict]:
    """Clamp sets/reps and enforce the per-session and weekly per-body-part set ceilings.

    ``planned`` items carry ``exercise`` (catalog row), ``sets`` and ``reps``; exercises
    whose sets are squeezed to zero are dropped.
    """
    used_this_week = dict(weekly_counts)
    session_total = 0
    result = []
    for item in planned:
        sets = clamp(int(item["sets"]), 1, MAX_SETS_PER_EXERCISE)
        reps = clamp(int(item["reps"]), 1, MAX_REPS_PER_SET)
        body_part = item["exercise"]["body_part"]

        sets = min(sets, MAX_SETS_PER_SESSION - session_total)
        sets = min(sets, MAX_WEEKLY_SETS_PER_BODY_PART - used_this_week.get(body_part, 0))
        if sets <= 0:
            continue

        session_total += sets
        used_this_week[body_part] = used_this_week.get(body_part, 0) + sets
        result.append({**item, "sets": sets, "reps": reps})
    return result
