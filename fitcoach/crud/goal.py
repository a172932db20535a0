# crud/goal.py
import json

from fitcoach.database import database, row_to_dict, rows_to_dicts
from fitcoach.schemas.goal import GoalCreate, GoalUpdate

GOAL_JSON_FIELDS = ("target",)


def _dump_target(target) -> str | None:
    if target is None:
        return None
    if hasattr(target, "model_dump"):
        target = target.model_dump(exclude_none=True)
    return json.dumps(target)


async def get_goal(goal_id: int):
    row = await database.fetch_one(query="SELECT * FROM goals WHERE id = :id", values={"id": goal_id})
    return row_to_dict(row, GOAL_JSON_FIELDS)


async def get_user_goals(user_id: int) -> list[dict]:
    query = "SELECT * FROM goals WHERE user_id = :user_id ORDER BY created_at DESC, id DESC"
    rows = await database.fetch_all(query=query, values={"user_id": user_id})
    return rows_to_dicts(rows, GOAL_JSON_FIELDS)


async def get_active_goal(user_id: int):
    query = """
        SELECT * FROM goals
        WHERE user_id = :user_id AND is_active = 1
        ORDER BY id DESC
        LIMIT 1
    """
    row = await database.fetch_one(query=query, values={"user_id": user_id})
    return row_to_dict(row, GOAL_JSON_FIELDS)


async def create_goal(user_id: int, goal: GoalCreate) -> dict:
    """Insert the goal as the user's only active goal."""
    async with database.transaction():
        await database.execute(
            query="UPDATE goals SET is_active = 0 WHERE user_id = :user_id AND is_active = 1",
            values={"user_id": user_id},
        )
        insert_query = """
            INSERT INTO goals (user_id, category, target, direction, value, unit, is_active, completed)
            VALUES (:user_id, :category, :target, :direction, :value, :unit, 1, 0)
        """
        goal_id = await database.execute(query=insert_query, values={
            "user_id": user_id,
            "category": goal.category,
            "target": _dump_target(goal.target),
            "direction": goal.direction,
            "value": goal.value,
            "unit": goal.unit,
        })
    return await get_goal(goal_id)


async def set_active_goal(user_id: int, goal_id: int) -> dict:
    async with database.transaction():
        await database.execute(
            query="UPDATE goals SET is_active = 0 WHERE user_id = :user_id AND is_active = 1",
            values={"user_id": user_id},
        )
        await database.execute(
            query="UPDATE goals SET is_active = 1 WHERE id = :id AND user_id = :user_id",
            values={"id": goal_id, "user_id": user_id},
        )
    return await get_goal(goal_id)


async def update_goal(goal_id: int, update: GoalUpdate) -> dict:
    fields = update.model_dump(exclude_unset=True)
    if fields:
        values = {"id": goal_id}
        assignments = []
        for key, value in fields.items():
            if key == "target":
                value = _dump_target(update.target)
            values[key] = value
            assignments.append(f"{key} = :{key}")
        await database.execute(query=f"UPDATE goals SET {', '.join(assignments)} WHERE id = :id", values=values)
    return await get_goal(goal_id)


async def delete_goal(goal_id: int):
    await database.execute(query="DELETE FROM goals WHERE id = :id", values={"id": goal_id})


async def complete_goal(goal_id: int) -> int:
    """Mark the goal completed and drop its unfinished sessions. Returns the number of sessions deleted."""
    async with database.transaction():
        await database.execute(
            query="UPDATE goals SET completed = 1, is_active = 0 WHERE id = :id",
            values={"id": goal_id},
        )
        # A session is finished only when it has sets and every set is completed.
        unfinished_query = """
            SELECT s.id FROM workout_sessions s
            WHERE s.goal_id = :goal_id
              AND (
                NOT EXISTS (SELECT 1 FROM exercise_sets es WHERE es.session_id = s.id)
                OR EXISTS (SELECT 1 FROM exercise_sets es WHERE es.session_id = s.id AND es.completed = 0)
              )
        """
        rows = await database.fetch_all(query=unfinished_query, values={"goal_id": goal_id})
        session_ids = [row["id"] for row in rows]
        for session_id in session_ids:
            await database.execute(query="DELETE FROM exercise_sets WHERE session_id = :id", values={"id": session_id})
            await database.execute(query="DELETE FROM daily_meals WHERE session_id = :id", values={"id": session_id})
            await database.execute(query="DELETE FROM workout_sessions WHERE id = :id", values={"id": session_id})
    return len(session_ids)
