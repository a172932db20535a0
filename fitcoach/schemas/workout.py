# schemas/workout.py
import datetime
from typing import Literal

from pydantic import BaseModel, Field

from fitcoach.schemas.meal import DailyMeal

Intensity = Literal["heavy", "moderate", "light"]
WorkoutType = Literal["main", "stretch", "cardio"]
VolumeMode = Literal["remove_set", "remove_exercise"]


class Exercise(BaseModel):
    id: int
    name: str
    body_part: str
    is_compound: bool = False
    equipment: str | None = None
    instructions: list[str] = []


class ExerciseCreate(BaseModel):
    name: str = Field(min_length=1)
    body_part: str = Field(min_length=1)
    is_compound: bool = False
    equipment: str | None = None
    instructions: list[str] = []


class ExerciseSet(BaseModel):
    id: int
    session_id: int
    exercise_id: int
    set_number: int
    planned_weight: float
    planned_reps: int
    actual_weight: float | None = None
    actual_reps: int | None = None
    actual_rpe: float | None = None
    completed: bool = False
    exercise: Exercise | None = None


class WorkoutSession(BaseModel):
    id: int
    user_id: int
    plan_id: int | None = None
    goal_id: int | None = None
    date: str
    week_number: int | None = None
    day_of_week: str | None = None
    intensity: str
    workout_type: str = "main"
    focus: str | None = None
    notes: str | None = None
    sets: list[ExerciseSet] = []
    meals: list[DailyMeal] = []


class SessionSummary(BaseModel):
    id: int
    date: str
    intensity: str
    workout_type: str
    focus: str | None = None
    completed_sets: int
    total_sets: int
    completion_rate: float


class PlannedExercise(BaseModel):
    name: str = Field(min_length=1)
    body_part: str | None = None
    sets: int = 3
    reps: int = 10


class DailyPlanOutput(BaseModel):
    focus: str = ""
    body_parts: list[str] = []
    intensity: Intensity = "moderate"
    exercises: list[PlannedExercise]
    notes: str = ""


class CompleteSetRequest(BaseModel):
    actual_weight: float | None = Field(default=None, ge=0)
    actual_reps: int | None = Field(default=None, ge=0)
    actual_rpe: float | None = Field(default=None, ge=0, le=10)
    completed: bool = True


class ReduceVolumeRequest(BaseModel):
    mode: VolumeMode


class MoveSessionRequest(BaseModel):
    new_date: datetime.date


class AddAccessoryRequest(BaseModel):
    body_part: str = Field(min_length=1)
    count: int = Field(default=1, ge=1, le=7)
    reference_date: datetime.date | None = None


class SwapExerciseRequest(BaseModel):
    exercise_id: int


class GenerateDailyRequest(BaseModel):
    date: datetime.date | None = None
