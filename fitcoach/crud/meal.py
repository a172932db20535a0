# crud/meal.py
import json

from fitcoach.database import database, row_to_dict, rows_to_dicts

MEAL_JSON_FIELDS = ("foods", "instructions", "meal_type")


async def create_meal(meal: dict) -> int:
    query = """
        INSERT INTO meals (name, foods, calories, instructions, meal_type)
        VALUES (:name, :foods, :calories, :instructions, :meal_type)
    """
    return await database.execute(query=query, values={
        "name": meal["name"],
        "foods": json.dumps(meal["foods"]),
        "calories": meal["calories"],
        "instructions": json.dumps(meal["instructions"]),
        "meal_type": json.dumps(meal["meal_type"]) if meal.get("meal_type") is not None else None,
    })


async def get_meal(meal_id: int):
    row = await database.fetch_one(query="SELECT * FROM meals WHERE id = :id", values={"id": meal_id})
    return row_to_dict(row, MEAL_JSON_FIELDS)


async def list_meals() -> list[dict]:
    rows = await database.fetch_all(query="SELECT * FROM meals ORDER BY id")
    return rows_to_dicts(rows, MEAL_JSON_FIELDS)


async def get_daily_meals(session_id: int) -> list[dict]:
    query = """
        SELECT * FROM daily_meals
        WHERE session_id = :session_id
        ORDER BY sort_order, id
    """
    rows = await database.fetch_all(query=query, values={"session_id": session_id})
    return rows_to_dicts(rows)


async def get_daily_meal(daily_meal_id: int):
    row = await database.fetch_one(query="SELECT * FROM daily_meals WHERE id = :id", values={"id": daily_meal_id})
    return row_to_dict(row)


async def replace_daily_meals(session_id: int, assignments: list[dict]):
    """Swap the session's planned meals for ``assignments`` ({meal_id, meal_type, sort_order})."""
    async with database.transaction():
        await database.execute(query="DELETE FROM daily_meals WHERE session_id = :id", values={"id": session_id})
        for assignment in assignments:
            await database.execute(
                query="""
                    INSERT INTO daily_meals (session_id, meal_id, meal_type, sort_order, completed)
                    VALUES (:session_id, :meal_id, :meal_type, :sort_order, 0)
                """,
                values={"session_id": session_id, **assignment},
            )


async def update_daily_meal_meal(daily_meal_id: int, meal_id: int):
    await database.execute(
        query="UPDATE daily_meals SET meal_id = :meal_id, completed = 0 WHERE id = :id",
        values={"id": daily_meal_id, "meal_id": meal_id},
    )


async def set_daily_meal_completed(daily_meal_id: int, completed: bool):
    await database.execute(
        query="UPDATE daily_meals SET completed = :completed WHERE id = :id",
        values={"id": daily_meal_id, "completed": 1 if completed else 0},
    )
