import asyncio
import math

import pytest

from fitcoach.core.exceptions import GenerationError
from fitcoach.services import strategy
from fitcoach.services.strategy import (
    coerce_fraction,
    coerce_time_horizon,
    extract_lift_target,
    infer_goal_category,
    transform_diet_plan,
    validate_training_strategy,
)
from fitcoach.utils.openai_client import parse_json_text

VALID = {"goal_type": "strength", "primary_focus": "bench press"}


@pytest.mark.parametrize("value, expected", [
    (16, 16),
    (8.9, 8),
    ("10 weeks", 10),
    ("abc", 12),
    (None, 12),
    (True, 12),
    (float("nan"), 12),
    ([4], 12),
])
def test_time_horizon_is_always_an_int(value, expected):
    result = coerce_time_horizon(value)
    assert result == expected
    assert isinstance(result, int)


@pytest.mark.parametrize("value, expected", [
    ("0.4", 0.4),
    (0.3, 0.3),
    (1, 1.0),
    ("heavy", 0.0),
    (None, 0.0),
    (True, 0.0),
    ({"a": 1}, 0.0),
    (float("inf"), 0.0),
])
def test_fraction_coercion(value, expected):
    assert coerce_fraction(value) == pytest.approx(expected)


def test_validate_strategy_normalizes_fields():
    result = validate_training_strategy({
        **VALID,
        "time_horizon_weeks": "8",
        "training_priorities": "not a list",
        "secondary_support": ["triceps"],
        "recommended_frequency": ["3x"],
        "intensity_distribution": {"heavy": "0.4", "moderate": 0.4, "light": False},
        "recovery_notes": 42,
        "split_type": "SOMETHING_ELSE",
        "phases": [{"name": "Base", "weeks": "1-4"}, "junk"],
    })
    assert result.time_horizon_weeks == 8
    assert result.training_priorities == []
    assert result.secondary_support == ["triceps"]
    assert result.recommended_frequency == {}
    assert result.intensity_distribution.heavy == pytest.approx(0.4)
    assert result.intensity_distribution.moderate == pytest.approx(0.4)
    assert result.intensity_distribution.light == 0
    assert result.recovery_notes == "42"
    assert result.split_type is None
    assert [phase.name for phase in result.phases] == ["Base"]


def test_validate_strategy_defaults_missing_distribution():
    result = validate_training_strategy({**VALID, "intensity_distribution": "heavy"})
    assert result.time_horizon_weeks == 12
    assert result.intensity_distribution.model_dump() == {"heavy": 0, "moderate": 0, "light": 0}


def test_validate_strategy_keeps_known_split():
    assert validate_training_strategy({**VALID, "split_type": "UPPER_LOWER"}).split_type == "UPPER_LOWER"


@pytest.mark.parametrize("raw", [{"goal_type": "strength"}, {"primary_focus": "x"}, [], "text"])
def test_validate_strategy_missing_required_keys_is_fatal(raw):
    with pytest.raises(GenerationError):
        validate_training_strategy(raw)


def test_diet_plan_drops_extra_fields_and_splits_calories():
    diet = transform_diet_plan({
        "dailyCalories": 2000,
        "supplements": ["creatine"],
        "notes": "drink water",
        "meals": [
            {"name": "Breakfast", "foods": ["oats", "milk"], "calories": 900, "protein": 30},
            {"name": "Lunch", "foods": ["rice"]},
            {"name": "Dinner", "foods": ["salmon"]},
        ],
    })
    dumped = diet.model_dump()
    assert set(dumped) == {"dailyCalories", "meals"}
    assert [meal["calories"] for meal in dumped["meals"]] == [666, 666, 666]
    assert all(set(meal) == {"name", "foods", "calories", "instructions"} for meal in dumped["meals"])
    assert all(len(meal["instructions"]) == 1 for meal in dumped["meals"])


def test_diet_plan_without_meals():
    assert transform_diet_plan({"dailyCalories": 1800}).meals == []


def test_diet_plan_requires_numeric_calories():
    with pytest.raises(GenerationError):
        transform_diet_plan({"dailyCalories": "lots", "meals": []})


@pytest.mark.parametrize("text, expected", [
    ("I want to lose 5kg of fat", ("body_composition", "decrease")),
    ("Get stronger: bench 100kg", ("strength", "increase")),
    ("Run a marathon", ("endurance", "increase")),
    ("Improve hip mobility", ("mobility", "increase")),
    ("Learn handstand technique", ("skill", "achieve")),
    ("Build muscle", ("body_composition", "increase")),
])
def test_infer_goal_category(text, expected):
    assert infer_goal_category(text) == expected


def test_infer_goal_category_first_match_wins():
    # "weight" (body composition) is checked before "lift" (strength)
    assert infer_goal_category("lift more weight")[0] == "body_composition"


def test_extract_lift_target():
    assert extract_lift_target("Bench press 100kg in 12 weeks") == ("bench press", 100.0, "kg")
    assert extract_lift_target("in 12 weeks I want a 225 lb squat") == ("squat", 225.0, "lbs")
    assert extract_lift_target("get strong") == (None, None, None)


def test_extract_lift_target_prefers_longest_lift_name():
    lift, _, _ = extract_lift_target("romanian deadlift 140kg")
    assert lift == "romanian deadlift"


def test_parse_json_text_strips_code_fence():
    assert parse_json_text('```json\n{"a": 1}\n```') == {"a": 1}
    with pytest.raises(GenerationError):
        parse_json_text("not json")
    with pytest.raises(GenerationError):
        parse_json_text("[1, 2]")


def test_generate_training_strategy_uses_client_reply(llm):
    llm.json_replies.append({**VALID, "time_horizon_weeks": 10.5})
    result = asyncio.run(strategy.generate_training_strategy("bench 100kg", None))
    assert result.time_horizon_weeks == 10
    assert not math.isnan(result.intensity_distribution.heavy)


def test_generate_training_strategy_does_not_retry(llm):
    llm.json_replies.extend([{"goal_type": "strength"}, VALID])
    with pytest.raises(GenerationError):
        asyncio.run(strategy.generate_training_strategy("bench 100kg", None))
    assert len(llm.calls) == 1
