# crud/plan.py
import json
from datetime import date

from fitcoach.database import database, row_to_dict, rows_to_dicts
from fitcoach.schemas.plan import DietPlan, TrainingStrategy

PLAN_JSON_FIELDS = ("training_strategy", "diet_plan")


async def get_plan(plan_id: int):
    row = await database.fetch_one(query="SELECT * FROM plans WHERE id = :id", values={"id": plan_id})
    return row_to_dict(row, PLAN_JSON_FIELDS)


async def get_user_plans(user_id: int) -> list[dict]:
    query = "SELECT * FROM plans WHERE user_id = :user_id ORDER BY id DESC"
    rows = await database.fetch_all(query=query, values={"user_id": user_id})
    return rows_to_dicts(rows, PLAN_JSON_FIELDS)


async def get_active_plan(user_id: int):
    query = """
        SELECT * FROM plans
        WHERE user_id = :user_id AND is_active = 1
        ORDER BY id DESC
        LIMIT 1
    """
    row = await database.fetch_one(query=query, values={"user_id": user_id})
    return row_to_dict(row, PLAN_JSON_FIELDS)


async def store_training_plan(
    user_id: int,
    strategy: TrainingStrategy,
    diet_plan: DietPlan | None = None,
    goal_id: int | None = None,
    name: str | None = None,
) -> dict:
    """Deactivate the user's current plans and insert the new one as active, atomically."""
    async with database.transaction():
        await database.execute(
            query="UPDATE plans SET is_active = 0 WHERE user_id = :user_id AND is_active = 1",
            values={"user_id": user_id},
        )
        insert_query = """
            INSERT INTO plans (user_id, goal_id, name, training_strategy, diet_plan, is_active)
            VALUES (:user_id, :goal_id, :name, :training_strategy, :diet_plan, 1)
        """
        plan_id = await database.execute(query=insert_query, values={
            "user_id": user_id,
            "goal_id": goal_id,
            "name": name or f"Training Plan - {date.today().isoformat()}",
            "training_strategy": json.dumps(strategy.model_dump()),
            "diet_plan": json.dumps(diet_plan.model_dump()) if diet_plan else None,
        })
    return await get_plan(plan_id)


async def update_diet_plan(plan_id: int, diet_plan: dict) -> dict:
    await database.execute(
        query="UPDATE plans SET diet_plan = :diet_plan WHERE id = :id",
        values={"id": plan_id, "diet_plan": json.dumps(diet_plan)},
    )
    return await get_plan(plan_id)


async def set_active_plan(user_id: int, plan_id: int) -> dict:
    async with database.transaction():
        await database.execute(
            query="UPDATE plans SET is_active = 0 WHERE user_id = :user_id AND id != :id",
            values={"user_id": user_id, "id": plan_id},
        )
        await database.execute(query="UPDATE plans SET is_active = 1 WHERE id = :id", values={"id": plan_id})
    return await get_plan(plan_id)
