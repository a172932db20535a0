# services/chat.py
"""Chat commands: classify free text into an intent, run it, record the exchange."""

import logging
import re
from datetime import date, timedelta

from pydantic import ValidationError

from fitcoach.core.exceptions import FitCoachError, GenerationError
from fitcoach.crud import blocked as blocked_crud
from fitcoach.crud import chat as chat_crud
from fitcoach.crud import exercise as exercise_crud
from fitcoach.crud import meal as meal_crud
from fitcoach.crud import meal_log as meal_log_crud
from fitcoach.crud import workout as workout_crud
from fitcoach.schemas.chat import ChatHistoryCreate, ChatResponse, DataChange, Intent
from fitcoach.schemas.meal import MealLogCreate
from fitcoach.schemas.plan import ProfileSnapshot
from fitcoach.services import nutrition, workout_editing
from fitcoach.services.daily_planner import BODY_PARTS
from fitcoach.services.matching import best_match
from fitcoach.services.strategy import describe_profile, parse_float_prefix
from fitcoach.utils import openai_client

logger = logging.getLogger(__name__)

DAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
MEAL_TYPES = ["breakfast", "lunch", "dinner", "snack"]
HISTORY_TURNS = 6

# everyday words mapped onto catalog body parts
BODY_PART_ALIASES = {
    "legs": "quads",
    "leg": "quads",
    "back": "upper back",
    "arms": "biceps",
    "bicep": "biceps",
    "tricep": "triceps",
    "shoulder": "shoulders",
    "delts": "shoulders",
    "butt": "glutes",
    "abdominals": "abs",
}

_LOG_MEAL = re.compile(
    r"^(?:log|logged|ate|had)\s+(?P<name>.+?)"
    r"(?:\s+(?P<calories>\d+(?:\.\d+)?)\s*(?:kcal|cals?|calories))?"
    r"(?:\s+(?P<protein>\d+(?:\.\d+)?)\s*g?\s*(?:of\s+)?protein)?\s*$"
)
_MOVE = re.compile(r"move\s+(?:my\s+)?(\w+)?.*?\bto\s+(\w+)")
_BLOCK = re.compile(r"(?:block|never show(?: me)?|don't show(?: me)?|do not show(?: me)?)\s+(.+?)(?:\s+again)?$")
_COUNT = re.compile(r"(\d+)\s*(?:x|times|sessions?|days?)")


# --- Keyword fallback ---

def extract_body_part(text: str) -> str | None:
    lowered = text.lower()
    found = next((part for part in BODY_PARTS if part in lowered), None)
    if found:
        return found
    words = re.findall(r"[a-z]+", lowered)
    return next((BODY_PART_ALIASES[word] for word in words if word in BODY_PART_ALIASES), None)


def extract_meal_type(text: str) -> str | None:
    lowered = text.lower()
    return next((meal_type for meal_type in MEAL_TYPES if meal_type in lowered), None)


def date_for_day_name(word: str | None, reference: date, allow_today: bool = False) -> date | None:
    """Resolve ``today``, ``tomorrow`` or a weekday name to the next matching date."""
    if not word:
        return None
    word = word.lower()
    if word == "today":
        return reference
    if word == "tomorrow":
        return reference + timedelta(days=1)
    index = next((i for i, name in enumerate(DAY_NAMES) if name.startswith(word) and len(word) >= 3), None)
    if index is None:
        return None
    ahead = (index - reference.weekday()) % 7
    if ahead == 0 and not allow_today:
        ahead = 7
    return reference + timedelta(days=ahead)


def parse_intent(message: str, reference: date) -> Intent:
    """Deterministic keyword rules used when the classifier is unavailable."""
    text = message.strip().lower()

    if any(word in text for word in ("swap", "replace", "switch")) or re.search(r"\bchange\b", text):
        return Intent(type="swap_exercise", params={"body_part": extract_body_part(text)}, confidence=0.6)

    if any(word in text for word in ("too tired", "reduce", "less volume", "lighter", "easier")):
        mode = "remove_exercise" if "exercise" in text else "remove_set"
        return Intent(type="reduce_volume", params={"mode": mode}, confidence=0.6)

    if any(word in text for word in ("more", "add", "focus")) and extract_body_part(text):
        count = _COUNT.search(text)
        return Intent(
            type="add_focus",
            params={"body_part": extract_body_part(text), "count": int(count.group(1)) if count else 1},
            confidence=0.6,
        )

    if any(phrase in text for phrase in ("what should i eat", "suggest", "meal idea", "hungry")):
        return Intent(
            type="suggest_meal",
            params={"meal_type": extract_meal_type(text), "high_protein": "protein" in text},
            confidence=0.6,
        )

    logged = _LOG_MEAL.match(text)
    if logged:
        return Intent(
            type="log_meal",
            params={
                "name": logged.group("name"),
                "calories": float(logged.group("calories")) if logged.group("calories") else 0,
                "protein": float(logged.group("protein")) if logged.group("protein") else None,
                "meal_type": extract_meal_type(text),
            },
            confidence=0.6,
        )

    moved = _MOVE.search(text)
    if moved:
        source = date_for_day_name(moved.group(1), reference, allow_today=True) or reference
        target = date_for_day_name(moved.group(2), reference)
        if target is not None:
            return Intent(
                type="move_session",
                params={"from_date": source.isoformat(), "to_date": target.isoformat()},
                confidence=0.6,
            )

    blocked = _BLOCK.search(text)
    if blocked:
        item_type = "meal" if any(word in text for word in ("meal", "food", "eat")) else "exercise"
        return Intent(
            type="block_item",
            params={"item_name": blocked.group(1).strip(), "item_type": item_type},
            confidence=0.6,
        )

    if text.endswith("?") or text.startswith(("how", "what", "why", "when", "should", "can", "is ")):
        return Intent(type="answer_question", params={"question": message.strip()}, confidence=0.4)

    return Intent(type="unknown", params={}, confidence=0.0)


# --- Classifier ---

def build_intent_prompt(message: str, reference: date) -> list[dict]:
    system = f"""You turn a fitness app user's chat command into one intent.
Today is {reference.isoformat()} ({reference.strftime('%A')}).

Return a JSON object {{"type": ..., "params": {{...}}, "confidence": 0-1}} where type is one of:
- "swap_exercise": params {{"exercise_name": string|null, "body_part": string|null}}
- "reduce_volume": params {{"mode": "remove_set"|"remove_exercise"}}
- "add_focus": params {{"body_part": string, "count": integer}}
- "suggest_meal": params {{"meal_type": "breakfast"|"lunch"|"dinner"|"snack"|null, "high_protein": boolean}}
- "log_meal": params {{"name": string, "calories": number, "protein": number|null, "meal_type": string|null}}
- "move_session": params {{"from_date": "YYYY-MM-DD", "to_date": "YYYY-MM-DD"}}
- "block_item": params {{"item_name": string, "item_type": "exercise"|"meal"}}
- "answer_question": params {{"question": string}}
- "unknown": params {{}}

Body parts: {', '.join(BODY_PARTS)}.
Resolve weekday names to the next such date on or after today."""
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": message},
    ]


async def classify_intent(message: str, reference: date) -> Intent:
    try:
        raw = await openai_client.generate_json(build_intent_prompt(message, reference), temperature=0.1)
        return Intent.model_validate(raw)
    except (GenerationError, ValidationError) as e:
        logger.warning("Intent classification failed, using keyword rules: %s", e)
        return parse_intent(message, reference)


# --- Execution ---

def _param_text(value) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value).strip() or None


def _param_number(value) -> float | None:
    """Classifier numbers may arrive as strings such as '450 kcal'."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return parse_float_prefix(value)
    return None


def _param_date(value, default: date) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        return default


async def _swap(user: dict, params: dict, reference: date) -> ChatResponse:
    session = await workout_crud.get_session_by_date(user["id"], reference.isoformat())
    if session is None:
        return ChatResponse(success=False, message="You have no workout scheduled today to change.")
    sets = await workout_crud.get_sets_for_session(session["id"])
    exercises = await exercise_crud.get_exercises_by_ids(s["exercise_id"] for s in sets)
    in_session = [exercises[i] for i in dict.fromkeys(s["exercise_id"] for s in sets) if i in exercises]
    if not in_session:
        return ChatResponse(success=False, message="Today's workout has no exercises to swap.")

    target = None
    exercise_name = _param_text(params.get("exercise_name"))
    body_part = _param_text(params.get("body_part"))
    if exercise_name:
        target = best_match(exercise_name, in_session, key=lambda e: e["name"], min_score=0.5)
    if target is None and body_part:
        target = next((e for e in in_session if body_part.lower() in e["body_part"]), None)
    target = target or in_session[0]

    result = await workout_editing.swap_exercise(user, session["id"], target["id"])
    removed, added = result["removed"]["name"], result["added"]["name"]
    return ChatResponse(
        success=True,
        message=f"Swapped {removed} for {added} in today's workout.",
        data_changes=[DataChange(type="exercise_swapped", description=f"{removed} -> {added}", id=session["id"])],
    )


async def _reduce(user: dict, params: dict, reference: date) -> ChatResponse:
    session = await workout_crud.get_session_by_date(user["id"], reference.isoformat())
    if session is None:
        return ChatResponse(success=False, message="You have no workout scheduled today.")
    mode = params.get("mode") if params.get("mode") in ("remove_set", "remove_exercise") else "remove_set"
    removed = await workout_editing.reduce_volume(user, session["id"], mode)
    what = "the biggest exercise" if mode == "remove_exercise" else "one set from each exercise"
    return ChatResponse(
        success=True,
        message=f"Took it easier today: removed {what} ({removed} sets).",
        data_changes=[DataChange(type="volume_reduced", description=f"{removed} sets removed", id=session["id"])],
    )


async def _add_focus(user: dict, params: dict, reference: date) -> ChatResponse:
    body_part = _param_text(params.get("body_part"))
    if not body_part:
        return ChatResponse(success=False, message="Which body part would you like to focus on?")
    count = int(min(workout_editing.UPCOMING_DAYS, max(1, _param_number(params.get("count")) or 1)))
    added = await workout_editing.add_accessory(user, body_part, count, reference)
    return ChatResponse(
        success=True,
        message=f"Added extra {body_part} work to {len(added)} upcoming workout(s).",
        data_changes=[
            DataChange(type="exercise_added", description=f"{item['exercise']} on {item['date']}", id=item["session_id"])
            for item in added
        ],
    )


async def _suggest(user: dict, params: dict, reference: date) -> ChatResponse:
    meal_type = params.get("meal_type") if params.get("meal_type") in MEAL_TYPES else None
    meals = await nutrition.suggest_meals(user, meal_type, bool(params.get("high_protein")))
    if not meals:
        return ChatResponse(success=False, message="I couldn't find a meal that fits right now.")
    listing = "; ".join(f"{meal['name']} ({meal['calories']:.0f} kcal)" for meal in meals)
    return ChatResponse(success=True, message=f"How about: {listing}")


async def _log_meal(user: dict, params: dict, reference: date) -> ChatResponse:
    meal_type = params.get("meal_type") if params.get("meal_type") in MEAL_TYPES else None
    log = MealLogCreate(
        date=_param_date(params.get("date"), reference),
        name=_param_text(params.get("name")) or "",
        calories=_param_number(params.get("calories")) or 0,
        protein=_param_number(params.get("protein")),
        meal_type=meal_type,
    )
    created = await meal_log_crud.create_meal_log(user["id"], log)
    return ChatResponse(
        success=True,
        message=f"Logged {created['name']} ({created['calories']:.0f} kcal).",
        data_changes=[DataChange(type="meal_logged", description=created["name"], id=created["id"])],
    )


async def _move(user: dict, params: dict, reference: date) -> ChatResponse:
    source = _param_date(params.get("from_date"), reference)
    target = _param_date(params.get("to_date"), reference)
    session = await workout_crud.get_session_by_date(user["id"], source.isoformat())
    if session is None:
        return ChatResponse(success=False, message=f"You have no workout on {source.isoformat()}.")
    await workout_editing.move_session(user, session["id"], target)
    return ChatResponse(
        success=True,
        message=f"Moved your {source.strftime('%A')} workout to {target.strftime('%A')} ({target.isoformat()}).",
        data_changes=[
            DataChange(type="session_moved", description=f"{source.isoformat()} -> {target.isoformat()}", id=session["id"])
        ],
    )


async def _block(user: dict, params: dict, reference: date) -> ChatResponse:
    name = _param_text(params.get("item_name")) or ""
    requested = "meal" if params.get("item_type") == "meal" else "exercise"
    catalogs = {"exercise": exercise_crud.list_exercises, "meal": meal_crud.list_meals}
    # look in the requested catalog first, then the other one
    item, item_type = None, requested
    for item_type in sorted(catalogs, key=lambda kind: kind != requested):
        catalog = await catalogs[item_type]()
        item = best_match(name, catalog, key=lambda entry: entry["name"], min_score=0.5) if name else None
        if item is not None:
            break
    if item is None:
        return ChatResponse(success=False, message=f"I couldn't find an exercise or meal called '{name}'.")
    if not await blocked_crud.block_item(user["id"], item_type, item["id"], item["name"]):
        return ChatResponse(success=True, message=f"{item['name']} is already blocked.")
    return ChatResponse(
        success=True,
        message=f"Got it, {item['name']} won't show up again.",
        data_changes=[DataChange(type="item_blocked", description=item["name"], id=item["id"])],
    )


def create_system_prompt(user: dict) -> str:
    return f"""You are FitCoach, a personal trainer who knows this user:
{describe_profile(ProfileSnapshot.model_validate(user))}
Injuries: {', '.join(user.get('injuries') or []) or 'none'}

Answer briefly and practically. Take the user's profile and injuries into account."""


async def _answer(user: dict, params: dict, reference: date, message: str = "") -> ChatResponse:
    history = await chat_crud.get_recent_chat_history(user["id"], HISTORY_TURNS)
    reply = await openai_client.generate_text([
        {"role": "system", "content": create_system_prompt(user)},
        *history,
        {"role": "user", "content": _param_text(params.get("question")) or message},
    ])
    return ChatResponse(success=True, message=reply)


HANDLERS = {
    "swap_exercise": _swap,
    "reduce_volume": _reduce,
    "add_focus": _add_focus,
    "suggest_meal": _suggest,
    "log_meal": _log_meal,
    "move_session": _move,
    "block_item": _block,
}

UNKNOWN_REPLY = (
    "Sorry, I didn't get that. Try 'swap this exercise', 'I'm too tired', "
    "'add more legs', 'what should I eat', 'log chicken salad 450 calories', "
    "'move Friday's workout to Saturday' or 'block burpees'."
)


async def execute_intent(user: dict, intent: Intent, reference: date, message: str = "") -> ChatResponse:
    """Run an intent. Failures, including unusable classifier parameters, become an unsuccessful reply."""
    try:
        if intent.type == "answer_question":
            response = await _answer(user, intent.params, reference, message)
        elif intent.type in HANDLERS:
            response = await HANDLERS[intent.type](user, intent.params, reference)
        else:
            response = ChatResponse(success=False, message=UNKNOWN_REPLY)
    except (FitCoachError, ValidationError, TypeError, ValueError) as e:
        logger.info("Chat intent %s failed for user %s: %s", intent.type, user["id"], e)
        response = ChatResponse(success=False, message=str(e))
    response.intent = intent.type
    return response


async def handle_command(user: dict, message: str, reference: date | None = None) -> ChatResponse:
    reference = reference or date.today()
    intent = await classify_intent(message, reference)
    logger.info("Chat intent for user %s: %s", user["id"], intent.type)
    response = await execute_intent(user, intent, reference, message)

    await chat_crud.save_chat_history(ChatHistoryCreate(user_id=user["id"], role_type="user", content=message))
    await chat_crud.save_chat_history(
        ChatHistoryCreate(user_id=user["id"], role_type="assistant", content=response.message)
    )
    return response
