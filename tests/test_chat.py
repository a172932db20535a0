from datetime import date

import pytest

from conftest import fetch_rows, insert_row
from fitcoach.core.exceptions import GenerationError
from fitcoach.services.chat import date_for_day_name, parse_intent

MONDAY = date(2026, 3, 2)


@pytest.mark.parametrize("message, intent_type, params", [
    ("swap this exercise", "swap_exercise", {"body_part": None}),
    ("Can you replace the chest exercise", "swap_exercise", {"body_part": "chest"}),
    ("I'm too tired today", "reduce_volume", {"mode": "remove_set"}),
    ("make it easier, drop an exercise", "reduce_volume", {"mode": "remove_exercise"}),
    ("add more legs", "add_focus", {"body_part": "quads", "count": 1}),
    ("focus on biceps 2 sessions", "add_focus", {"body_part": "biceps", "count": 2}),
    ("what should I eat for lunch", "suggest_meal", {"meal_type": "lunch", "high_protein": False}),
    ("log chicken salad 450 calories", "log_meal",
     {"name": "chicken salad", "calories": 450, "protein": None, "meal_type": None}),
    ("had oatmeal 300 kcal 20g protein", "log_meal",
     {"name": "oatmeal", "calories": 300, "protein": 20, "meal_type": None}),
    ("move friday's workout to saturday", "move_session", {"from_date": "2026-03-06", "to_date": "2026-03-07"}),
    ("move my workout to tomorrow", "move_session", {"from_date": "2026-03-02", "to_date": "2026-03-03"}),
    ("block burpees", "block_item", {"item_name": "burpees", "item_type": "exercise"}),
    ("never show me that tuna meal again", "block_item", {"item_name": "that tuna meal", "item_type": "meal"}),
    ("how much protein do I need?", "answer_question", {"question": "how much protein do I need?"}),
    ("banana", "unknown", {}),
])
def test_parse_intent(message, intent_type, params):
    intent = parse_intent(message, MONDAY)
    assert intent.type == intent_type
    assert intent.params == params


def test_date_for_day_name():
    assert date_for_day_name("wed", MONDAY) == date(2026, 3, 4)
    assert date_for_day_name("monday", MONDAY) == date(2026, 3, 9)
    assert date_for_day_name("monday", MONDAY, allow_today=True) == MONDAY
    assert date_for_day_name("mo", MONDAY) is None
    assert date_for_day_name("someday", MONDAY) is None


# --- Command execution ---

def _session_with_sets(user_id, catalog, day="2026-03-02"):
    session = insert_row("workout_sessions", user_id=user_id, date=day, intensity="moderate", workout_type="main")
    for exercise, count in (("Squat", 3), ("Leg Extension", 2)):
        for number in range(1, count + 1):
            insert_row("exercise_sets", session_id=session, exercise_id=catalog[exercise], set_number=number,
                       planned_weight=0, planned_reps=10, completed=False)
    return session


def _command(client, auth, message, day="2026-03-02"):
    response = client.post("/chat/command", headers=auth, json={"message": message, "date": day})
    assert response.status_code == 200
    return response.json()["data"]


def test_keyword_rules_run_when_classifier_is_unavailable(client, auth, user, catalog, llm):
    session = _session_with_sets(user["id"], catalog)
    data = _command(client, auth, "I'm too tired")
    assert data["success"] is True
    assert data["intent"] == "reduce_volume"
    assert data["data_changes"][0]["id"] == session
    assert len(fetch_rows("exercise_sets", session_id=session)) == 3
    # the classifier was tried first
    assert len(llm.calls) == 1


def test_invalid_classifier_output_falls_back_to_keyword_rules(client, auth, user, catalog, llm):
    llm.json_replies.append({"type": "dance", "params": {}})
    data = _command(client, auth, "block face pull")
    assert data["intent"] == "block_item"
    blocked = fetch_rows("blocked_items", user_id=user["id"])
    assert [(b["item_type"], b["item_name"]) for b in blocked] == [("exercise", "Face Pull")]


def test_classified_meal_log(client, auth, user, llm):
    llm.json_replies.append({
        "type": "log_meal",
        "params": {"name": "Burrito", "calories": 780, "protein": 35, "meal_type": "lunch"},
        "confidence": 0.9,
    })
    data = _command(client, auth, "I just had a burrito for lunch")
    assert data["success"] is True
    logs = fetch_rows("meal_logs", user_id=user["id"])
    assert [(log["date"], log["name"], log["calories"], log["meal_type"]) for log in logs] == [
        ("2026-03-02", "Burrito", 780, "lunch"),
    ]


def test_block_searches_the_other_catalog(client, auth, user, catalog, meals, llm):
    llm.json_replies.append({"type": "block_item", "params": {"item_name": "salmon salad", "item_type": "exercise"}})
    data = _command(client, auth, "never show me salmon salad again")
    assert data["success"] is True
    blocked = fetch_rows("blocked_items", user_id=user["id"])
    assert [(b["item_type"], b["item_id"]) for b in blocked] == [("meal", str(meals["Salmon Salad"]))]

    llm.json_replies.append({"type": "block_item", "params": {"item_name": "salmon salad", "item_type": "meal"}})
    data = _command(client, auth, "never show me salmon salad again")
    assert "already blocked" in data["message"]
    assert len(fetch_rows("blocked_items", user_id=user["id"])) == 1


def test_add_focus_through_chat(client, auth, user, catalog, llm):
    session = insert_row("workout_sessions", user_id=user["id"], date="2026-03-04", intensity="moderate",
                         workout_type="main")
    data = _command(client, auth, "add more arms")
    assert data["intent"] == "add_focus"
    assert [change["id"] for change in data["data_changes"]] == [session]
    assert {s["exercise_id"] for s in fetch_rows("exercise_sets", session_id=session)} == {catalog["Bicep Curl"]}


def test_move_without_a_session_is_a_failed_reply(client, auth, user, llm):
    data = _command(client, auth, "move friday's workout to saturday")
    assert data["success"] is False
    assert data["intent"] == "move_session"
    assert "2026-03-06" in data["message"]


def test_move_onto_an_occupied_day_is_a_failed_reply(client, auth, user, catalog, llm):
    _session_with_sets(user["id"], catalog, day="2026-03-06")
    _session_with_sets(user["id"], catalog, day="2026-03-07")
    data = _command(client, auth, "move friday's workout to saturday")
    assert data["success"] is False
    assert [s["date"] for s in fetch_rows("workout_sessions")] == ["2026-03-06", "2026-03-07"]


def test_question_is_answered_with_profile_and_history(client, auth, user, llm):
    llm.json_replies.append({"type": "answer_question", "params": {"question": "How much protein do I need?"}})
    llm.text_replies.append("Aim for about 160 g a day.")
    data = _command(client, auth, "How much protein do I need?")
    assert data == {
        "success": True,
        "message": "Aim for about 160 g a day.",
        "data_changes": [],
        "intent": "answer_question",
    }
    system_prompt = llm.calls[-1][0]["content"]
    assert "80" in system_prompt


def test_failed_answer_generation_is_a_failed_reply(client, auth, user, llm):
    llm.json_replies.append({"type": "answer_question", "params": {"question": "why?"}})
    data = _command(client, auth, "why?")
    assert data["success"] is False


def test_unknown_command_lists_examples(client, auth, user, llm):
    data = _command(client, auth, "banana")
    assert data["success"] is False
    assert data["intent"] == "unknown"
    assert "block burpees" in data["message"]


def test_exchange_is_recorded_in_history(client, auth, user, llm):
    llm.json_replies.append(GenerationError("classifier down"))
    _command(client, auth, "banana")
    history = client.get("/chat/history", headers=auth).json()["data"]
    assert [(h["role_type"], h["content"][:6]) for h in history] == [("user", "banana"), ("assistant", "Sorry,")]


def test_empty_message_is_rejected(client, auth):
    response = client.post("/chat/command", headers=auth, json={"message": ""})
    assert response.status_code == 400


def test_classifier_numbers_given_as_text_are_coerced(client, auth, user, llm):
    llm.json_replies.append({
        "type": "log_meal",
        "params": {"name": "Chicken salad", "calories": "450 kcal", "protein": "32g"},
    })
    data = _command(client, auth, "log my chicken salad")
    assert data["success"] is True
    logs = fetch_rows("meal_logs", user_id=user["id"])
    assert [(log["name"], log["calories"], log["protein"]) for log in logs] == [("Chicken salad", 450, 32)]
    assert len(fetch_rows("chat_messages", user_id=user["id"])) == 2


def test_non_text_classifier_params_do_not_break_the_reply(client, auth, user, catalog, llm):
    session = insert_row("workout_sessions", user_id=user["id"], date="2026-03-02", intensity="moderate",
                         workout_type="main")
    insert_row("exercise_sets", session_id=session, exercise_id=catalog["Bench Press"], set_number=1,
               planned_weight=0, planned_reps=8, completed=False)
    llm.json_replies.append({"type": "swap_exercise", "params": {"exercise_name": ["squat"], "body_part": 7}})
    data = _command(client, auth, "swap something")
    assert data["success"] is True
    assert data["intent"] == "swap_exercise"

    llm.json_replies.append({"type": "add_focus", "params": {"body_part": {"name": "biceps"}, "count": "lots"}})
    data = _command(client, auth, "more of that")
    assert data["success"] is False
    assert len(fetch_rows("chat_messages", user_id=user["id"])) == 4
