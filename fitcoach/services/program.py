# services/program.py
"""Goal and training-program orchestration."""

import logging

from fitcoach.core.exceptions import NotFoundError, PrimaryLiftError
from fitcoach.crud import exercise as exercise_crud
from fitcoach.crud import goal as goal_crud
from fitcoach.crud import plan as plan_crud
from fitcoach.schemas.goal import GoalCreate, GoalTarget, GoalUpdate
from fitcoach.schemas.plan import GenerateProgramRequest, ProfileSnapshot, StorePlanRequest
from fitcoach.services import strategy as strategy_service
from fitcoach.services.primary_lifts import find_matching_primary_lift, validate_primary_lift_for_goal

logger = logging.getLogger(__name__)


async def _check_strength_target(goal: GoalCreate):
    if goal.category != "strength" or goal.target is None:
        return
    result = validate_primary_lift_for_goal(await exercise_crud.list_exercise_names(), goal.target.exercise)
    if not result["is_valid"]:
        raise PrimaryLiftError(result["error"], result["suggestion"])


async def _owned_goal(user: dict, goal_id: int) -> dict:
    goal = await goal_crud.get_goal(goal_id)
    if goal is None or goal["user_id"] != user["id"]:
        raise NotFoundError(f"Goal {goal_id} not found")
    return goal


async def create_goal(user: dict, goal: GoalCreate) -> dict:
    await _check_strength_target(goal)
    created = await goal_crud.create_goal(user["id"], goal)
    logger.info("Created %s goal %s for user %s", goal.category, created["id"], user["id"])
    return created


async def update_goal(user: dict, goal_id: int, update: GoalUpdate) -> dict:
    current = await _owned_goal(user, goal_id)
    merged = GoalCreate.model_validate({**current, **update.model_dump(exclude_unset=True)})
    await _check_strength_target(merged)
    return await goal_crud.update_goal(goal_id, update)


async def activate_goal(user: dict, goal_id: int) -> dict:
    await _owned_goal(user, goal_id)
    return await goal_crud.set_active_goal(user["id"], goal_id)


async def delete_goal(user: dict, goal_id: int):
    await _owned_goal(user, goal_id)
    await goal_crud.delete_goal(goal_id)


async def complete_goal(user: dict, goal_id: int) -> int:
    """Mark the goal completed and drop its unfinished sessions. Returns how many were dropped."""
    await _owned_goal(user, goal_id)
    removed = await goal_crud.complete_goal(goal_id)
    logger.info("Completed goal %s for user %s, %d unfinished sessions removed", goal_id, user["id"], removed)
    return removed


async def goal_from_text(goal_text: str) -> GoalCreate:
    """Infer a goal from free text; a strength goal targets its lift only when the lift validates."""
    category, direction = strategy_service.infer_goal_category(goal_text)
    if category != "strength":
        return GoalCreate(category=category, direction=direction)

    lift, value, unit = strategy_service.extract_lift_target(goal_text)
    if lift is not None:
        result = validate_primary_lift_for_goal(await exercise_crud.list_exercise_names(), lift)
        if result["is_valid"]:
            return GoalCreate(
                category="strength",
                target=GoalTarget(
                    exercise=find_matching_primary_lift(lift) or lift,
                    metric="reps" if unit == "reps" else "weight",
                ),
                direction="increase",
                value=value,
                unit=unit,
            )
        logger.info("Lift %r failed validation, using an overall strength goal: %s", lift, result["error"])
    return GoalCreate(category="strength", direction="increase")


def _profile_snapshot(user: dict, request: GenerateProgramRequest) -> ProfileSnapshot:
    if request.profile is not None:
        return request.profile
    return ProfileSnapshot.model_validate(user)


async def generate_program(user: dict, request: GenerateProgramRequest) -> dict:
    """Generate strategy and diet, then persist the goal and the plan."""
    profile = _profile_snapshot(user, request)
    strategy = await strategy_service.generate_training_strategy(request.goal, profile)
    diet_plan = await strategy_service.generate_diet_plan(request.goal, profile, request.dietary_restrictions)

    goal = await goal_crud.create_goal(user["id"], await goal_from_text(request.goal))
    plan = await plan_crud.store_training_plan(user["id"], strategy, diet_plan, goal_id=goal["id"])
    logger.info("Generated program %s (%s) for user %s", plan["id"], strategy.goal_type, user["id"])
    return {"goal": goal, "plan": plan}


async def store_plan(user: dict, request: StorePlanRequest) -> dict:
    strategy = strategy_service.validate_training_strategy(request.training_strategy)
    if request.goal_id is not None:
        await _owned_goal(user, request.goal_id)
    return await plan_crud.store_training_plan(
        user["id"], strategy, request.diet_plan, goal_id=request.goal_id, name=request.name
    )


async def activate_plan(user: dict, plan_id: int) -> dict:
    plan = await plan_crud.get_plan(plan_id)
    if plan is None or plan["user_id"] != user["id"]:
        raise NotFoundError(f"Plan {plan_id} not found")
    return await plan_crud.set_active_plan(user["id"], plan_id)
