# crud/meal_log.py
from fitcoach.database import database, row_to_dict, rows_to_dicts
from fitcoach.schemas.meal import MealLogCreate, MealLogUpdate


async def create_meal_log(user_id: int, log: MealLogCreate) -> dict:
    query = """
        INSERT INTO meal_logs (user_id, date, name, calories, protein, meal_type)
        VALUES (:user_id, :date, :name, :calories, :protein, :meal_type)
    """
    log_id = await database.execute(query=query, values={
        "user_id": user_id,
        "date": log.date.isoformat(),
        "name": log.name,
        "calories": log.calories,
        "protein": log.protein,
        "meal_type": log.meal_type,
    })
    return await get_meal_log(log_id)


async def get_meal_log(log_id: int):
    row = await database.fetch_one(query="SELECT * FROM meal_logs WHERE id = :id", values={"id": log_id})
    return row_to_dict(row)


async def get_meal_logs_by_date(user_id: int, log_date: str) -> list[dict]:
    query = "SELECT * FROM meal_logs WHERE user_id = :user_id AND date = :date ORDER BY id"
    rows = await database.fetch_all(query=query, values={"user_id": user_id, "date": log_date})
    return rows_to_dicts(rows)


async def get_meal_logs_by_range(user_id: int, start_date: str, end_date: str) -> list[dict]:
    query = """
        SELECT * FROM meal_logs
        WHERE user_id = :user_id AND date BETWEEN :start_date AND :end_date
        ORDER BY date, id
    """
    rows = await database.fetch_all(query=query, values={
        "user_id": user_id, "start_date": start_date, "end_date": end_date,
    })
    return rows_to_dicts(rows)


async def update_meal_log(log_id: int, update: MealLogUpdate) -> dict:
    fields = update.model_dump(exclude_unset=True)
    if fields:
        assignments = ", ".join(f"{key} = :{key}" for key in fields)
        await database.execute(
            query=f"UPDATE meal_logs SET {assignments} WHERE id = :id",
            values={"id": log_id, **fields},
        )
    return await get_meal_log(log_id)


async def delete_meal_log(log_id: int):
    await database.execute(query="DELETE FROM meal_logs WHERE id = :id", values={"id": log_id})
