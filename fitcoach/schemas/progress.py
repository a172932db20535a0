# schemas/progress.py
from pydantic import BaseModel


class ProgressPoint(BaseModel):
    date: str
    value: float


class ProgressProjection(BaseModel):
    current_weight: float
    projected_weight: float
    weekly_gain: float
    weeks_to_target: int | None = None


class ExerciseProgress(BaseModel):
    exercise_id: int
    name: str
    body_part: str
    latest_weight: float
    sessions: int


class BodyPartVolume(BaseModel):
    body_part: str
    total_sets: int
    total_volume: float


class WeeklyVolume(BaseModel):
    week_start: str
    completed_sets: int
    total_sets: int
    completion_rate: float
    tonnage: float
    body_parts: list[BodyPartVolume] = []


class GoalProgress(BaseModel):
    goal_id: int
    category: str
    current_value: float | None = None
    target_value: float | None = None
    start_value: float | None = None
    unit: str = ""
    progress_percent: float = 0
    days_elapsed: int = 0
    progress_data: list[ProgressPoint] = []
