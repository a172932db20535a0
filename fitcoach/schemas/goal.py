# schemas/goal.py
from datetime import datetime
from typing import Literal

from pydantic import BaseModel

GoalCategory = Literal["body_composition", "strength", "endurance", "mobility", "skill"]
GoalDirection = Literal["increase", "decrease", "achieve"]
GoalMetric = Literal["weight", "reps", "time", "distance", "rom"]


class GoalTarget(BaseModel):
    exercise: str | None = None
    movement: str | None = None
    metric: GoalMetric | None = None


class GoalCreate(BaseModel):
    category: GoalCategory
    target: GoalTarget | None = None
    direction: GoalDirection | None = None
    value: float | None = None
    unit: str | None = None


class GoalUpdate(BaseModel):
    category: GoalCategory | None = None
    target: GoalTarget | None = None
    direction: GoalDirection | None = None
    value: float | None = None
    unit: str | None = None


class Goal(GoalCreate):
    id: int
    user_id: int
    is_active: bool
    completed: bool = False
    created_at: datetime | None = None
