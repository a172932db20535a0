# routers/meal.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fitcoach.core.responses import ok
from fitcoach.crud import meal as meal_crud
from fitcoach.dependencies import get_current_profile, get_current_user
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.meal import DailyMeal, Meal, MealType
from fitcoach.services import nutrition

router = APIRouter(prefix="/meals", tags=["meals"])


@router.get("", response_model=Envelope[list[Meal]])
async def list_meals(current_user: dict = Depends(get_current_user)):
    return ok(await meal_crud.list_meals())


@router.get("/suggestions", response_model=Envelope[list[Meal]])
async def suggest_meals(
    meal_type: Optional[MealType] = None,
    high_protein: bool = False,
    limit: int = Query(default=3, ge=1, le=20),
    user: dict = Depends(get_current_profile),
):
    return ok(await nutrition.suggest_meals(user, meal_type, high_protein, limit))


@router.post("/daily/{daily_meal_id}/regenerate", response_model=Envelope[DailyMeal])
async def regenerate_daily_meal(daily_meal_id: int, user: dict = Depends(get_current_profile)):
    """Replace a planned meal with a different, non-blocked meal of the same type."""
    return ok(await nutrition.regenerate_daily_meal(user, daily_meal_id))


@router.post("/daily/{daily_meal_id}/toggle", response_model=Envelope[DailyMeal])
async def toggle_daily_meal(daily_meal_id: int, user: dict = Depends(get_current_profile)):
    return ok(await nutrition.toggle_daily_meal(user, daily_meal_id))
