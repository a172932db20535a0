# schemas/plan.py
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from fitcoach.schemas.user import EquipmentAccess, ExperienceLevel

SplitType = Literal["PPL", "UPPER_LOWER", "FULL_BODY", "BRO_SPLIT", "PUSH_PULL_LEGS_ARMS"]


class IntensityDistribution(BaseModel):
    heavy: float = 0
    moderate: float = 0
    light: float = 0


class ProgramPhase(BaseModel):
    name: str = ""
    weeks: str | int = ""
    goal: str = ""
    description: str = ""


class TrainingStrategy(BaseModel):
    goal_type: str
    primary_focus: str
    time_horizon_weeks: int = 12
    training_priorities: list[Any] = []
    secondary_support: list[Any] = []
    recommended_frequency: dict[str, Any] = {}
    intensity_distribution: IntensityDistribution = IntensityDistribution()
    recovery_notes: str = ""
    split_type: SplitType | None = None
    program_overview: str = ""
    phases: list[ProgramPhase] = []


class DietMeal(BaseModel):
    name: str
    foods: list[str]
    calories: float
    instructions: list[str]


class DietPlan(BaseModel):
    dailyCalories: float
    meals: list[DietMeal] = []


class ProfileSnapshot(BaseModel):
    weight_kg: float | None = None
    height_cm: float | None = None
    experience_level: ExperienceLevel | None = None
    equipment_access: EquipmentAccess | None = None


class GenerateProgramRequest(BaseModel):
    goal: str = Field(min_length=1)
    profile: ProfileSnapshot | None = None
    dietary_restrictions: str | None = None


class StorePlanRequest(BaseModel):
    goal_id: int | None = None
    name: str | None = None
    training_strategy: dict[str, Any]
    diet_plan: DietPlan | None = None


class Plan(BaseModel):
    id: int
    user_id: int
    goal_id: int | None = None
    name: str
    training_strategy: TrainingStrategy | None = None
    diet_plan: DietPlan | None = None
    is_active: bool
    created_at: datetime | None = None


class AddMealRequest(BaseModel):
    plan_id: int
    meal: DietMeal


class UpdateMealRequest(BaseModel):
    plan_id: int
    meal_index: int = Field(ge=0)
    name: str | None = None
    foods: list[str] | None = None
    calories: float | None = None
    instructions: list[str] | None = None


class RemoveMealRequest(BaseModel):
    plan_id: int
    meal_index: int = Field(ge=0)
