# schemas/meal.py
import datetime
from typing import Literal

from pydantic import BaseModel, Field

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class Meal(BaseModel):
    id: int
    name: str
    foods: list[str]
    calories: float
    instructions: list[str]
    meal_type: list[str] | None = None


class DailyMeal(BaseModel):
    id: int
    session_id: int
    meal_id: int
    meal_type: str
    sort_order: int
    completed: bool = False
    meal: Meal | None = None


class MealLogCreate(BaseModel):
    date: datetime.date
    name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    protein: float | None = Field(default=None, ge=0)
    meal_type: MealType | None = None


class MealLogUpdate(BaseModel):
    name: str | None = None
    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    meal_type: MealType | None = None


class MealLog(BaseModel):
    id: int
    user_id: int
    date: str
    name: str
    calories: float
    protein: float | None = None
    meal_type: str | None = None


class ImportFailure(BaseModel):
    index: int
    name: str | None = None
    error: str


class ImportResult(BaseModel):
    imported: int
    failed: int
    errors: list[ImportFailure] = []
