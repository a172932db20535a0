# routers/progress.py
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends

from fitcoach.core.exceptions import InputValidationError
from fitcoach.core.responses import ok
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.progress import BodyPartVolume, ExerciseProgress, GoalProgress
from fitcoach.services import progress

router = APIRouter(prefix="/progress", tags=["progress"])

DEFAULT_VOLUME_DAYS = 28


@router.get("/exercises", response_model=Envelope[list[ExerciseProgress]])
async def read_latest_weights(user: dict = Depends(get_current_profile)):
    return ok(await progress.latest_weights(user))


@router.get("/exercises/{exercise_id}")
async def read_exercise_progress(
    exercise_id: int, target: Optional[float] = None, user: dict = Depends(get_current_profile)
):
    """Top-set weight per session and the trend projected four weeks ahead."""
    return ok(await progress.exercise_progress(user, exercise_id, target))


@router.get("/body-parts", response_model=Envelope[list[BodyPartVolume]])
async def read_body_part_volume(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: dict = Depends(get_current_profile),
):
    end_date = end_date or date.today()
    start_date = start_date or end_date - timedelta(days=DEFAULT_VOLUME_DAYS)
    if start_date > end_date:
        raise InputValidationError("start_date must not be after end_date")
    return ok(await progress.body_part_volume(user, start_date, end_date))


@router.get("/goal", response_model=Envelope[GoalProgress])
async def read_goal_progress(user: dict = Depends(get_current_profile)):
    return ok(await progress.goal_progress(user))
