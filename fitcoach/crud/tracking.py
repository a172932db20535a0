# crud/tracking.py
from fitcoach.database import database, row_to_dict, rows_to_dicts

TRACKING_FIELDS = ("water_intake", "steps", "weight_kg", "distance_km")


async def get_tracking(user_id: int, tracking_date: str):
    query = "SELECT * FROM daily_tracking WHERE user_id = :user_id AND date = :date"
    row = await database.fetch_one(query=query, values={"user_id": user_id, "date": tracking_date})
    return row_to_dict(row)


async def get_tracking_range(user_id: int, start_date: str, end_date: str) -> list[dict]:
    query = """
        SELECT * FROM daily_tracking
        WHERE user_id = :user_id AND date BETWEEN :start_date AND :end_date
        ORDER BY date
    """
    rows = await database.fetch_all(query=query, values={
        "user_id": user_id, "start_date": start_date, "end_date": end_date,
    })
    return rows_to_dicts(rows)


async def get_weight_entries_since(user_id: int, start_date: str) -> list[dict]:
    query = """
        SELECT date, weight_kg FROM daily_tracking
        WHERE user_id = :user_id AND date >= :start_date AND weight_kg IS NOT NULL
        ORDER BY date
    """
    rows = await database.fetch_all(query=query, values={"user_id": user_id, "start_date": start_date})
    return rows_to_dicts(rows)


async def get_distance_entries_since(user_id: int, start_date: str) -> list[dict]:
    query = """
        SELECT date, distance_km FROM daily_tracking
        WHERE user_id = :user_id AND date >= :start_date AND distance_km IS NOT NULL AND distance_km > 0
        ORDER BY date
    """
    rows = await database.fetch_all(query=query, values={"user_id": user_id, "start_date": start_date})
    return rows_to_dicts(rows)


async def upsert_tracking(user_id: int, tracking_date: str, fields: dict) -> dict:
    """Write the given fields for (user, date), creating the row on first write."""
    fields = {key: value for key, value in fields.items() if key in TRACKING_FIELDS}
    async with database.transaction():
        existing = await get_tracking(user_id, tracking_date)
        if existing is None:
            await database.execute(
                query="""
                    INSERT INTO daily_tracking (user_id, date, water_intake, steps, weight_kg, distance_km)
                    VALUES (:user_id, :date, :water_intake, :steps, :weight_kg, :distance_km)
                """,
                values={
                    "user_id": user_id,
                    "date": tracking_date,
                    "water_intake": fields.get("water_intake") or 0,
                    "steps": fields.get("steps") or 0,
                    "weight_kg": fields.get("weight_kg"),
                    "distance_km": fields.get("distance_km"),
                },
            )
        elif fields:
            assignments = ", ".join(f"{key} = :{key}" for key in fields)
            await database.execute(
                query=f"UPDATE daily_tracking SET {assignments} WHERE id = :id",
                values={"id": existing["id"], **fields},
            )
    return await get_tracking(user_id, tracking_date)


async def add_water(user_id: int, tracking_date: str, amount: float) -> dict:
    # one statement, so concurrent increments cannot overwrite each other
    query = """
        INSERT INTO daily_tracking (user_id, date, water_intake, steps)
        VALUES (:user_id, :date, :amount, 0)
        ON CONFLICT (user_id, date) DO UPDATE SET water_intake = daily_tracking.water_intake + excluded.water_intake
    """
    await database.execute(query=query, values={"user_id": user_id, "date": tracking_date, "amount": amount})
    return await get_tracking(user_id, tracking_date)
