# crud/exercise.py
import json

from fitcoach.database import database, row_to_dict, rows_to_dicts
from fitcoach.schemas.workout import ExerciseCreate

EXERCISE_JSON_FIELDS = ("instructions",)


async def create_exercise(exercise: ExerciseCreate) -> dict:
    query = """
        INSERT INTO exercises (name, body_part, is_compound, equipment, instructions)
        VALUES (:name, :body_part, :is_compound, :equipment, :instructions)
    """
    exercise_id = await database.execute(query=query, values={
        "name": exercise.name,
        "body_part": exercise.body_part.lower(),
        "is_compound": exercise.is_compound,
        "equipment": exercise.equipment,
        "instructions": json.dumps(exercise.instructions),
    })
    return await get_exercise(exercise_id)


async def get_exercise(exercise_id: int):
    row = await database.fetch_one(query="SELECT * FROM exercises WHERE id = :id", values={"id": exercise_id})
    return row_to_dict(row, EXERCISE_JSON_FIELDS)


async def get_exercises_by_ids(exercise_ids) -> dict[int, dict]:
    ids = sorted(set(exercise_ids))
    if not ids:
        return {}
    placeholders = ", ".join(f":id{i}" for i in range(len(ids)))
    rows = await database.fetch_all(
        query=f"SELECT * FROM exercises WHERE id IN ({placeholders})",
        values={f"id{i}": exercise_id for i, exercise_id in enumerate(ids)},
    )
    return {exercise["id"]: exercise for exercise in rows_to_dicts(rows, EXERCISE_JSON_FIELDS)}


async def list_exercises(body_part: str | None = None) -> list[dict]:
    if body_part:
        rows = await database.fetch_all(
            query="SELECT * FROM exercises WHERE body_part = :body_part ORDER BY id",
            values={"body_part": body_part.lower()},
        )
    else:
        rows = await database.fetch_all(query="SELECT * FROM exercises ORDER BY id")
    return rows_to_dicts(rows, EXERCISE_JSON_FIELDS)


async def list_exercise_names() -> list[str]:
    rows = await database.fetch_all(query="SELECT name FROM exercises ORDER BY id")
    return [row["name"] for row in rows]


async def list_body_parts() -> list[str]:
    rows = await database.fetch_all(query="SELECT DISTINCT body_part FROM exercises ORDER BY body_part")
    return [row["body_part"] for row in rows]
