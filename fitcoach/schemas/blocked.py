# schemas/blocked.py
from typing import Literal

from pydantic import BaseModel, Field


class BlockItemRequest(BaseModel):
    item_type: Literal["exercise", "meal"]
    item_id: int
    item_name: str = Field(min_length=1)
