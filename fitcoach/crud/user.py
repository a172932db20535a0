# crud/user.py
import json

from fitcoach.database import database, row_to_dict
from fitcoach.schemas.user import ProfileUpdate, UserSync

USER_JSON_FIELDS = ("equipment_access", "injuries")


async def get_user_by_external_id(external_id: str):
    query = "SELECT * FROM users WHERE external_id = :external_id"
    row = await database.fetch_one(query=query, values={"external_id": external_id})
    return row_to_dict(row, USER_JSON_FIELDS)


async def get_user_by_id(user_id: int):
    query = "SELECT * FROM users WHERE id = :user_id"
    row = await database.fetch_one(query=query, values={"user_id": user_id})
    return row_to_dict(row, USER_JSON_FIELDS)


async def sync_user(user: UserSync) -> dict:
    """Create the user on first sight of an identity; later syncs refresh name/email/avatar."""
    existing = await get_user_by_external_id(user.external_id)
    if existing:
        update_query = """
            UPDATE users SET name = :name, email = :email, avatar = :avatar
            WHERE id = :id
        """
        await database.execute(query=update_query, values={
            "id": existing["id"],
            "name": user.name,
            "email": user.email,
            "avatar": user.avatar,
        })
        return await get_user_by_id(existing["id"])

    insert_query = """
        INSERT INTO users (external_id, name, email, avatar, injuries)
        VALUES (:external_id, :name, :email, :avatar, :injuries)
    """
    user_id = await database.execute(query=insert_query, values={
        "external_id": user.external_id,
        "name": user.name,
        "email": user.email,
        "avatar": user.avatar,
        "injuries": json.dumps([]),
    })
    return await get_user_by_id(user_id)


async def update_profile(user_id: int, update: ProfileUpdate) -> dict:
    fields = update.model_dump(exclude_unset=True)
    if not fields:
        return await get_user_by_id(user_id)

    values = {"id": user_id}
    assignments = []
    for key, value in fields.items():
        if key == "injuries" and value is None:
            value = []
        if key in USER_JSON_FIELDS:
            value = None if value is None else json.dumps(value)
        values[key] = value
        assignments.append(f"{key} = :{key}")

    query = f"UPDATE users SET {', '.join(assignments)} WHERE id = :id"
    await database.execute(query=query, values=values)
    return await get_user_by_id(user_id)
