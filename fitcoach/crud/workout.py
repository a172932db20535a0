# crud/workout.py
from collections import defaultdict

from fitcoach.database import database, row_to_dict, rows_to_dicts


async def get_session(session_id: int):
    row = await database.fetch_one(query="SELECT * FROM workout_sessions WHERE id = :id", values={"id": session_id})
    return row_to_dict(row)


async def get_session_by_date(user_id: int, session_date: str):
    query = """
        SELECT * FROM workout_sessions
        WHERE user_id = :user_id AND date = :date
        ORDER BY id DESC
        LIMIT 1
    """
    row = await database.fetch_one(query=query, values={"user_id": user_id, "date": session_date})
    return row_to_dict(row)


async def get_sessions_in_range(user_id: int, start_date: str, end_date: str, descending: bool = False) -> list[dict]:
    query = f"""
        SELECT * FROM workout_sessions
        WHERE user_id = :user_id AND date BETWEEN :start_date AND :end_date
        ORDER BY date {"DESC" if descending else "ASC"}, id
    """
    rows = await database.fetch_all(query=query, values={
        "user_id": user_id, "start_date": start_date, "end_date": end_date,
    })
    return rows_to_dicts(rows)


async def get_recent_sessions(user_id: int, before_date: str, limit: int = 3) -> list[dict]:
    """Most recent sessions strictly before ``before_date``, newest first."""
    query = """
        SELECT * FROM workout_sessions
        WHERE user_id = :user_id AND date < :before_date
        ORDER BY date DESC, id DESC
        LIMIT :limit
    """
    rows = await database.fetch_all(query=query, values={
        "user_id": user_id, "before_date": before_date, "limit": limit,
    })
    return rows_to_dicts(rows)


async def get_sets_for_session(session_id: int) -> list[dict]:
    query = "SELECT * FROM exercise_sets WHERE session_id = :session_id ORDER BY id"
    rows = await database.fetch_all(query=query, values={"session_id": session_id})
    return rows_to_dicts(rows)


async def get_sets_for_sessions(session_ids) -> dict[int, list[dict]]:
    ids = list(session_ids)
    grouped = defaultdict(list)
    if not ids:
        return grouped
    placeholders = ", ".join(f":id{i}" for i in range(len(ids)))
    rows = await database.fetch_all(
        query=f"SELECT * FROM exercise_sets WHERE session_id IN ({placeholders}) ORDER BY id",
        values={f"id{i}": session_id for i, session_id in enumerate(ids)},
    )
    for row in rows_to_dicts(rows):
        grouped[row["session_id"]].append(row)
    return grouped


async def get_set(set_id: int):
    row = await database.fetch_one(query="SELECT * FROM exercise_sets WHERE id = :id", values={"id": set_id})
    return row_to_dict(row)


async def _insert_session(user_id: int, session: dict) -> int:
    query = """
        INSERT INTO workout_sessions
            (user_id, plan_id, goal_id, date, week_number, day_of_week, intensity, workout_type, focus, notes)
        VALUES
            (:user_id, :plan_id, :goal_id, :date, :week_number, :day_of_week, :intensity, :workout_type, :focus, :notes)
    """
    return await database.execute(query=query, values={
        "user_id": user_id,
        "plan_id": session.get("plan_id"),
        "goal_id": session.get("goal_id"),
        "date": session["date"],
        "week_number": session.get("week_number"),
        "day_of_week": session.get("day_of_week"),
        "intensity": session.get("intensity", "moderate"),
        "workout_type": session.get("workout_type", "main"),
        "focus": session.get("focus"),
        "notes": session.get("notes"),
    })


async def insert_set(session_id: int, exercise_id: int, set_number: int, planned_weight: float, planned_reps: int) -> int:
    query = """
        INSERT INTO exercise_sets (session_id, exercise_id, set_number, planned_weight, planned_reps, completed)
        VALUES (:session_id, :exercise_id, :set_number, :planned_weight, :planned_reps, 0)
    """
    return await database.execute(query=query, values={
        "session_id": session_id,
        "exercise_id": exercise_id,
        "set_number": set_number,
        "planned_weight": planned_weight,
        "planned_reps": planned_reps,
    })


async def _delete_session_rows(session_id: int):
    await database.execute(query="DELETE FROM exercise_sets WHERE session_id = :id", values={"id": session_id})
    await database.execute(query="DELETE FROM daily_meals WHERE session_id = :id", values={"id": session_id})
    await database.execute(query="DELETE FROM workout_sessions WHERE id = :id", values={"id": session_id})


async def replace_session_for_date(user_id: int, session: dict, sets: list[dict]) -> int:
    """Supersede every session the user has on ``session["date"]`` with a new one and its sets."""
    async with database.transaction():
        existing = await database.fetch_all(
            query="SELECT id FROM workout_sessions WHERE user_id = :user_id AND date = :date",
            values={"user_id": user_id, "date": session["date"]},
        )
        for row in existing:
            await _delete_session_rows(row["id"])
        session_id = await _insert_session(user_id, session)
        for planned in sets:
            await insert_set(
                session_id,
                planned["exercise_id"],
                planned["set_number"],
                planned["planned_weight"],
                planned["planned_reps"],
            )
    return session_id


async def delete_session(session_id: int):
    async with database.transaction():
        await _delete_session_rows(session_id)


async def update_session_date(session_id: int, new_date: str, day_of_week: str | None = None):
    await database.execute(
        query="UPDATE workout_sessions SET date = :date, day_of_week = :day_of_week WHERE id = :id",
        values={"id": session_id, "date": new_date, "day_of_week": day_of_week},
    )


async def other_session_on_date(user_id: int, session_date: str, exclude_session_id: int):
    query = """
        SELECT id FROM workout_sessions
        WHERE user_id = :user_id AND date = :date AND id != :session_id
        LIMIT 1
    """
    row = await database.fetch_one(query=query, values={
        "user_id": user_id, "date": session_date, "session_id": exclude_session_id,
    })
    return row_to_dict(row)


async def update_set_completion(
    set_id: int,
    actual_weight: float | None,
    actual_reps: int | None,
    actual_rpe: float | None,
    completed: bool,
):
    # completed only ever moves false -> true
    query = """
        UPDATE exercise_sets SET
            actual_weight = COALESCE(:actual_weight, actual_weight),
            actual_reps = COALESCE(:actual_reps, actual_reps),
            actual_rpe = COALESCE(:actual_rpe, actual_rpe),
            completed = CASE WHEN completed = 1 THEN 1 ELSE :completed END
        WHERE id = :id
    """
    await database.execute(query=query, values={
        "id": set_id,
        "actual_weight": actual_weight,
        "actual_reps": actual_reps,
        "actual_rpe": actual_rpe,
        "completed": 1 if completed else 0,
    })
    return await get_set(set_id)


async def delete_sets(set_ids):
    async with database.transaction():
        for set_id in set_ids:
            await database.execute(query="DELETE FROM exercise_sets WHERE id = :id", values={"id": set_id})


async def get_max_set_number(session_id: int, exercise_id: int) -> int:
    query = """
        SELECT MAX(set_number) AS max_set FROM exercise_sets
        WHERE session_id = :session_id AND exercise_id = :exercise_id
    """
    row = await database.fetch_one(query=query, values={"session_id": session_id, "exercise_id": exercise_id})
    if row is None or row["max_set"] is None:
        return 0
    return row["max_set"]


async def replace_exercise_in_session(session_id: int, old_exercise_id: int, new_exercise_id: int, planned_weight: float):
    """Delete the old exercise's sets and insert fresh ones for the new exercise with the same numbers and reps."""
    async with database.transaction():
        old_sets = await database.fetch_all(
            query="""
                SELECT set_number, planned_reps FROM exercise_sets
                WHERE session_id = :session_id AND exercise_id = :exercise_id
                ORDER BY set_number
            """,
            values={"session_id": session_id, "exercise_id": old_exercise_id},
        )
        await database.execute(
            query="DELETE FROM exercise_sets WHERE session_id = :session_id AND exercise_id = :exercise_id",
            values={"session_id": session_id, "exercise_id": old_exercise_id},
        )
        for old in old_sets:
            await insert_set(session_id, new_exercise_id, old["set_number"], planned_weight, old["planned_reps"])


async def count_sets_by_body_part(user_id: int, start_date: str, end_date: str, exclude_date: str | None = None) -> dict:
    """Planned set counts per body part over a date range, optionally skipping one day."""
    query = """
        SELECT e.body_part AS body_part, COUNT(es.id) AS total
        FROM exercise_sets es
        JOIN workout_sessions s ON s.id = es.session_id
        JOIN exercises e ON e.id = es.exercise_id
        WHERE s.user_id = :user_id AND s.date BETWEEN :start_date AND :end_date
          AND (:exclude_date IS NULL OR s.date != :exclude_date)
        GROUP BY e.body_part
    """
    rows = await database.fetch_all(query=query, values={
        "user_id": user_id, "start_date": start_date, "end_date": end_date, "exclude_date": exclude_date,
    })
    return {row["body_part"]: row["total"] for row in rows}


async def get_recent_exercise_sessions(user_id: int, exercise_id: int, before_date: str, limit: int = 3) -> list[list[dict]]:
    """Completed-set groups of one exercise from the latest sessions before a date, newest first."""
    session_query = """
        SELECT DISTINCT s.id AS id, s.date AS date
        FROM workout_sessions s
        JOIN exercise_sets es ON es.session_id = s.id
        WHERE s.user_id = :user_id AND s.date < :before_date
          AND es.exercise_id = :exercise_id AND es.completed = 1
        ORDER BY s.date DESC, s.id DESC
        LIMIT :limit
    """
    sessions = await database.fetch_all(query=session_query, values={
        "user_id": user_id, "exercise_id": exercise_id, "before_date": before_date, "limit": limit,
    })
    history = []
    for session in sessions:
        rows = await database.fetch_all(
            query="""
                SELECT * FROM exercise_sets
                WHERE session_id = :session_id AND exercise_id = :exercise_id
                ORDER BY set_number
            """,
            values={"session_id": session["id"], "exercise_id": exercise_id},
        )
        history.append(rows_to_dicts(rows))
    return history


async def get_max_weight_history(user_id: int, exercise_id: int) -> list[dict]:
    """(date, heaviest completed set) per session, oldest first."""
    query = """
        SELECT s.date AS date, MAX(COALESCE(es.actual_weight, es.planned_weight)) AS value
        FROM exercise_sets es
        JOIN workout_sessions s ON s.id = es.session_id
        WHERE s.user_id = :user_id AND es.exercise_id = :exercise_id AND es.completed = 1
        GROUP BY s.id, s.date
        ORDER BY s.date ASC
    """
    rows = await database.fetch_all(query=query, values={"user_id": user_id, "exercise_id": exercise_id})
    return rows_to_dicts(rows)


async def get_sets_in_range(user_id: int, start_date: str, end_date: str) -> list[dict]:
    query = """
        SELECT es.*, s.date AS date, e.name AS exercise_name, e.body_part AS body_part
        FROM exercise_sets es
        JOIN workout_sessions s ON s.id = es.session_id
        JOIN exercises e ON e.id = es.exercise_id
        WHERE s.user_id = :user_id AND s.date BETWEEN :start_date AND :end_date
        ORDER BY s.date, es.id
    """
    rows = await database.fetch_all(query=query, values={
        "user_id": user_id, "start_date": start_date, "end_date": end_date,
    })
    return rows_to_dicts(rows)
