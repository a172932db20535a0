# services/nutrition.py
import logging

from fitcoach.core.exceptions import ConflictError, NotFoundError
from fitcoach.crud import blocked as blocked_crud
from fitcoach.crud import meal as meal_crud
from fitcoach.crud import plan as plan_crud
from fitcoach.crud import workout as workout_crud
from fitcoach.schemas.meal import ImportFailure, ImportResult
from fitcoach.schemas.plan import DietMeal, UpdateMealRequest
from fitcoach.services.daily_planner import compute_nutrition_intent

logger = logging.getLogger(__name__)

DAILY_MEAL_TYPES = ["breakfast", "lunch", "dinner", "snack"]
HIGH_PROTEIN_WORDS = ("protein", "chicken", "meat", "beef", "fish", "egg", "tuna", "turkey")


def serves_meal_type(meal: dict, meal_type: str) -> bool:
    types = meal.get("meal_type")
    return not types or meal_type in types


def pick_meal(meals: list[dict], meal_type: str, target_calories: float, exclude_ids=()) -> dict | None:
    """Meal of the given type closest to the calorie target; catalog order breaks ties."""
    candidates = [m for m in meals if serves_meal_type(m, meal_type) and m["id"] not in exclude_ids]
    if not candidates:
        return None
    return min(candidates, key=lambda meal: abs(meal["calories"] - target_calories))


async def _allowed_meals(user_id: int) -> list[dict]:
    blocked_ids = await blocked_crud.get_blocked_ids(user_id, "meal")
    return [meal for meal in await meal_crud.list_meals() if meal["id"] not in blocked_ids]


async def assign_daily_meals(user: dict, session_id: int, goal: dict | None) -> list[dict]:
    meals = await _allowed_meals(user["id"])
    intent = compute_nutrition_intent(goal, user)
    share = intent["calorie_target"] / len(DAILY_MEAL_TYPES)

    assignments, used = [], set()
    for order, meal_type in enumerate(DAILY_MEAL_TYPES):
        meal = pick_meal(meals, meal_type, share, exclude_ids=used) or pick_meal(meals, meal_type, share)
        if meal is None:
            continue
        used.add(meal["id"])
        assignments.append({"meal_id": meal["id"], "meal_type": meal_type, "sort_order": order})

    if not assignments:
        logger.warning("No meals available for session %s", session_id)
    await meal_crud.replace_daily_meals(session_id, assignments)
    return assignments


async def _owned_daily_meal(user: dict, daily_meal_id: int) -> dict:
    daily_meal = await meal_crud.get_daily_meal(daily_meal_id)
    if daily_meal is not None:
        session = await workout_crud.get_session(daily_meal["session_id"])
        if session is not None and session["user_id"] == user["id"]:
            return daily_meal
    raise NotFoundError(f"Daily meal {daily_meal_id} not found")


async def regenerate_daily_meal(user: dict, daily_meal_id: int) -> dict:
    """Swap a planned meal for a different meal of the same type."""
    daily_meal = await _owned_daily_meal(user, daily_meal_id)
    current = await meal_crud.get_meal(daily_meal["meal_id"])
    target = current["calories"] if current else 0
    meals = await _allowed_meals(user["id"])
    replacement = pick_meal(meals, daily_meal["meal_type"], target, exclude_ids={daily_meal["meal_id"]})
    if replacement is None:
        raise ConflictError(f"No alternative {daily_meal['meal_type']} meal is available")
    await meal_crud.update_daily_meal_meal(daily_meal_id, replacement["id"])
    return await meal_crud.get_daily_meal(daily_meal_id)


async def toggle_daily_meal(user: dict, daily_meal_id: int) -> dict:
    daily_meal = await _owned_daily_meal(user, daily_meal_id)
    await meal_crud.set_daily_meal_completed(daily_meal_id, not daily_meal["completed"])
    return await meal_crud.get_daily_meal(daily_meal_id)


async def suggest_meals(user: dict, meal_type: str | None = None, high_protein: bool = False, limit: int = 3) -> list[dict]:
    meals = await _allowed_meals(user["id"])
    if meal_type:
        meals = [meal for meal in meals if serves_meal_type(meal, meal_type)]
    if high_protein:
        meals = [
            meal for meal in meals
            if any(word in meal["name"].lower() for word in HIGH_PROTEIN_WORDS) or meal["calories"] > 400
        ]
    return meals[:limit]


# --- Catalog import ---

def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_meal_item(item) -> tuple[dict | None, str | None]:
    """(clean meal, None) for a valid import entry, else (None, reason)."""
    if not isinstance(item, dict):
        return None, "entry must be an object"
    if not isinstance(item.get("name"), str) or not item["name"].strip():
        return None, "name must be a non-empty string"
    if not isinstance(item.get("foods"), list):
        return None, "foods must be an array"
    if not _is_number(item.get("calories")):
        return None, "calories must be a number"
    if not isinstance(item.get("instructions"), list):
        return None, "instructions must be an array"
    meal_type = item.get("meal_type")
    if meal_type is not None and not isinstance(meal_type, list):
        return None, "meal_type must be an array when present"
    return {
        "name": item["name"].strip(),
        "foods": [str(food) for food in item["foods"]],
        "calories": float(item["calories"]),
        "instructions": [str(step) for step in item["instructions"]],
        "meal_type": [str(t).lower() for t in meal_type] if meal_type is not None else None,
    }, None


async def import_meals(items: list) -> ImportResult:
    """Import valid entries and report the rest; one bad entry never blocks the others."""
    imported, errors = 0, []
    for index, item in enumerate(items):
        meal, error = validate_meal_item(item)
        if error:
            name = item.get("name") if isinstance(item, dict) and isinstance(item.get("name"), str) else None
            errors.append(ImportFailure(index=index, name=name, error=error))
            continue
        await meal_crud.create_meal(meal)
        imported += 1
    logger.info("Imported %d meals, %d failed", imported, len(errors))
    return ImportResult(imported=imported, failed=len(errors), errors=errors)


# --- Diet plan editing on a stored plan ---

async def _owned_plan(user: dict, plan_id: int) -> dict:
    plan = await plan_crud.get_plan(plan_id)
    if plan is None or plan["user_id"] != user["id"]:
        raise NotFoundError(f"Plan {plan_id} not found")
    return plan


def _diet(plan: dict) -> dict:
    diet = plan.get("diet_plan") or {}
    return {"dailyCalories": diet.get("dailyCalories", 0), "meals": list(diet.get("meals") or [])}


def _check_index(diet: dict, meal_index: int):
    if meal_index >= len(diet["meals"]):
        raise NotFoundError(f"Meal index {meal_index} is out of range (plan has {len(diet['meals'])} meals)")


async def add_plan_meal(user: dict, plan_id: int, meal: DietMeal) -> dict:
    plan = await _owned_plan(user, plan_id)
    diet = _diet(plan)
    diet["meals"].append(meal.model_dump())
    return await plan_crud.update_diet_plan(plan_id, diet)


async def update_plan_meal(user: dict, request: UpdateMealRequest) -> dict:
    plan = await _owned_plan(user, request.plan_id)
    diet = _diet(plan)
    _check_index(diet, request.meal_index)
    changes = request.model_dump(exclude_unset=True, exclude={"plan_id", "meal_index"})
    diet["meals"][request.meal_index] = {**diet["meals"][request.meal_index], **changes}
    return await plan_crud.update_diet_plan(request.plan_id, diet)


async def remove_plan_meal(user: dict, plan_id: int, meal_index: int) -> dict:
    plan = await _owned_plan(user, plan_id)
    diet = _diet(plan)
    _check_index(diet, meal_index)
    diet["meals"].pop(meal_index)
    return await plan_crud.update_diet_plan(plan_id, diet)
