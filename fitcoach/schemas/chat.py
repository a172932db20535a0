# schemas/chat.py
import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

IntentType = Literal[
    "swap_exercise",
    "reduce_volume",
    "add_focus",
    "suggest_meal",
    "log_meal",
    "move_session",
    "block_item",
    "answer_question",
    "unknown",
]


class ChatCommand(BaseModel):
    message: str = Field(min_length=1)
    date: Optional[datetime.date] = None


class Intent(BaseModel):
    type: IntentType
    params: dict[str, Any] = {}
    confidence: float = 0.0


class DataChange(BaseModel):
    type: str
    description: str
    id: Optional[int] = None


class ChatResponse(BaseModel):
    success: bool
    message: str
    data_changes: list[DataChange] = []
    intent: Optional[IntentType] = None


class ChatHistoryCreate(BaseModel):
    user_id: int
    role_type: Literal["user", "assistant"]
    content: str


class ChatHistory(ChatHistoryCreate):
    id: int
    created_at: Optional[datetime.datetime] = None
