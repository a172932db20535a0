# crud/blocked.py
from fitcoach.database import database, rows_to_dicts


async def block_item(user_id: int, item_type: str, item_id, item_name: str) -> bool:
    """Returns False when the item was already blocked."""
    existing = await database.fetch_one(
        query="""
            SELECT id FROM blocked_items
            WHERE user_id = :user_id AND item_type = :item_type AND item_id = :item_id
        """,
        values={"user_id": user_id, "item_type": item_type, "item_id": str(item_id)},
    )
    if existing:
        return False
    await database.execute(
        query="""
            INSERT INTO blocked_items (user_id, item_type, item_id, item_name)
            VALUES (:user_id, :item_type, :item_id, :item_name)
        """,
        values={"user_id": user_id, "item_type": item_type, "item_id": str(item_id), "item_name": item_name},
    )
    return True


async def get_blocked_items(user_id: int, item_type: str | None = None) -> list[dict]:
    if item_type:
        rows = await database.fetch_all(
            query="SELECT * FROM blocked_items WHERE user_id = :user_id AND item_type = :item_type ORDER BY id",
            values={"user_id": user_id, "item_type": item_type},
        )
    else:
        rows = await database.fetch_all(
            query="SELECT * FROM blocked_items WHERE user_id = :user_id ORDER BY id",
            values={"user_id": user_id},
        )
    return rows_to_dicts(rows)


async def get_blocked_ids(user_id: int, item_type: str) -> set[int]:
    return {int(item["item_id"]) for item in await get_blocked_items(user_id, item_type)}


async def unblock_item(user_id: int, blocked_id: int):
    await database.execute(
        query="DELETE FROM blocked_items WHERE id = :id AND user_id = :user_id",
        values={"id": blocked_id, "user_id": user_id},
    )
