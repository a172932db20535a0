# routers/tracking.py
from datetime import date

from fastapi import APIRouter, Depends

from fitcoach.core.exceptions import InputValidationError
from fitcoach.core.responses import ok
from fitcoach.crud import tracking as tracking_crud
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.tracking import DailyTracking, TrackingUpdate, WaterIntake

router = APIRouter(prefix="/tracking", tags=["tracking"])


@router.get("", response_model=Envelope[list[DailyTracking]])
async def read_tracking_range(start_date: date, end_date: date, user: dict = Depends(get_current_profile)):
    if start_date > end_date:
        raise InputValidationError("start_date must not be after end_date")
    return ok(await tracking_crud.get_tracking_range(user["id"], start_date.isoformat(), end_date.isoformat()))


@router.get("/{day}", response_model=Envelope[DailyTracking])
async def read_tracking(day: date, user: dict = Depends(get_current_profile)):
    """A day without a record reads as zero water and zero steps."""
    tracking = await tracking_crud.get_tracking(user["id"], day.isoformat())
    return ok(tracking or DailyTracking(date=day.isoformat()))


@router.put("/{day}", response_model=Envelope[DailyTracking])
async def update_tracking(day: date, update: TrackingUpdate, user: dict = Depends(get_current_profile)):
    fields = update.model_dump(exclude_unset=True, exclude_none=True)
    return ok(await tracking_crud.upsert_tracking(user["id"], day.isoformat(), fields))


@router.post("/{day}/water", response_model=Envelope[DailyTracking])
async def add_water(day: date, intake: WaterIntake, user: dict = Depends(get_current_profile)):
    return ok(await tracking_crud.add_water(user["id"], day.isoformat(), intake.amount))
