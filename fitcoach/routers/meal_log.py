# routers/meal_log.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fitcoach.core.exceptions import InputValidationError, NotFoundError
from fitcoach.core.responses import ok
from fitcoach.crud import meal_log as meal_log_crud
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.meal import MealLog, MealLogCreate, MealLogUpdate

router = APIRouter(prefix="/meal-logs", tags=["meal logs"])


async def _owned_log(user: dict, log_id: int) -> dict:
    log = await meal_log_crud.get_meal_log(log_id)
    if log is None or log["user_id"] != user["id"]:
        raise NotFoundError(f"Meal log {log_id} not found")
    return log


@router.post("", response_model=Envelope[MealLog])
async def create_meal_log(log: MealLogCreate, user: dict = Depends(get_current_profile)):
    return ok(await meal_log_crud.create_meal_log(user["id"], log))


@router.get("", response_model=Envelope[list[MealLog]])
async def list_meal_logs(
    day: Optional[date] = Query(default=None, alias="date"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: dict = Depends(get_current_profile),
):
    """Logs for one day (``date``, default today) or for an inclusive date range."""
    if start_date or end_date:
        if not (start_date and end_date):
            raise InputValidationError("start_date and end_date must be given together")
        if start_date > end_date:
            raise InputValidationError("start_date must not be after end_date")
        return ok(await meal_log_crud.get_meal_logs_by_range(user["id"], start_date.isoformat(), end_date.isoformat()))
    return ok(await meal_log_crud.get_meal_logs_by_date(user["id"], (day or date.today()).isoformat()))


@router.put("/{log_id}", response_model=Envelope[MealLog])
async def update_meal_log(log_id: int, update: MealLogUpdate, user: dict = Depends(get_current_profile)):
    await _owned_log(user, log_id)
    return ok(await meal_log_crud.update_meal_log(log_id, update))


@router.delete("/{log_id}")
async def delete_meal_log(log_id: int, user: dict = Depends(get_current_profile)):
    await _owned_log(user, log_id)
    await meal_log_crud.delete_meal_log(log_id)
    return ok({"id": log_id})
