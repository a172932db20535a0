# crud/chat.py
from fitcoach.database import database, rows_to_dicts
from fitcoach.schemas.chat import ChatHistoryCreate


async def save_chat_history(history: ChatHistoryCreate):
    """Append one message to the chat_messages table."""
    insert_query = """
        INSERT INTO chat_messages (user_id, role_type, content)
        VALUES (:user_id, :role_type, :content)
    """
    await database.execute(query=insert_query, values={
        "user_id": history.user_id,
        "role_type": history.role_type,
        "content": history.content,
    })


async def get_chat_history(user_id: int, limit: int = 50) -> list[dict]:
    """The user's latest messages, oldest first."""
    query = """
        SELECT id, user_id, role_type, content, created_at
        FROM chat_messages
        WHERE user_id = :user_id
        ORDER BY id DESC
        LIMIT :limit
    """
    results = await database.fetch_all(query=query, values={"user_id": user_id, "limit": limit})
    return list(reversed(rows_to_dicts(results)))


async def get_recent_chat_history(user_id: int, limit: int = 10) -> list[dict]:
    """Recent messages in chat-completions message format."""
    return [
        {"role": row["role_type"], "content": row["content"]}
        for row in await get_chat_history(user_id, limit)
    ]
