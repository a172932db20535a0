# routers/workout.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from fitcoach.core.responses import ok
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.progress import WeeklyVolume
from fitcoach.schemas.workout import (
    AddAccessoryRequest,
    CompleteSetRequest,
    ExerciseSet,
    GenerateDailyRequest,
    MoveSessionRequest,
    ReduceVolumeRequest,
    SessionSummary,
    SwapExerciseRequest,
    WorkoutSession,
)
from fitcoach.services import materializer, progress, workout_editing

router = APIRouter(prefix="/workouts", tags=["workouts"])


@router.get("/today", response_model=Envelope[WorkoutSession])
async def read_today(
    day: Optional[date] = Query(default=None, alias="date"),
    user: dict = Depends(get_current_profile),
):
    """The session for a date (default today) with its sets, exercises and planned meals."""
    return ok(await workout_editing.get_workout_for_date(user, day or date.today()))


@router.get("/upcoming", response_model=Envelope[list[WorkoutSession]])
async def read_upcoming(
    day: Optional[date] = Query(default=None, alias="date"),
    user: dict = Depends(get_current_profile),
):
    return ok(await workout_editing.get_upcoming(user, day or date.today()))


@router.get("/history", response_model=Envelope[list[SessionSummary]])
async def read_history(
    day: Optional[date] = Query(default=None, alias="date"),
    user: dict = Depends(get_current_profile),
):
    return ok(await workout_editing.get_history(user, day or date.today()))


@router.get("/volume", response_model=Envelope[WeeklyVolume])
async def read_weekly_volume(
    day: Optional[date] = Query(default=None, alias="date"),
    user: dict = Depends(get_current_profile),
):
    return ok(await progress.weekly_volume(user, day or date.today()))


@router.post("/generate", response_model=Envelope[WorkoutSession])
async def generate_workout(request: GenerateDailyRequest, user: dict = Depends(get_current_profile)):
    """Generate the day's session; any session already on that date is replaced."""
    session_date = request.date or date.today()
    session_id = await materializer.generate_daily_workout(user, session_date)
    return ok(await workout_editing.get_session_detail(user, session_id))


@router.get("/sessions/{session_id}", response_model=Envelope[WorkoutSession])
async def read_session(session_id: int, user: dict = Depends(get_current_profile)):
    return ok(await workout_editing.get_session_detail(user, session_id))


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: int, user: dict = Depends(get_current_profile)):
    await workout_editing.delete_session(user, session_id)
    return ok({"session_id": session_id})


@router.post("/sessions/{session_id}/reduce")
async def reduce_volume(session_id: int, request: ReduceVolumeRequest, user: dict = Depends(get_current_profile)):
    removed = await workout_editing.reduce_volume(user, session_id, request.mode)
    return ok({"session_id": session_id, "removed_sets": removed})


@router.post("/sessions/{session_id}/move", response_model=Envelope[WorkoutSession])
async def move_session(session_id: int, request: MoveSessionRequest, user: dict = Depends(get_current_profile)):
    return ok(await workout_editing.move_session(user, session_id, request.new_date))


@router.post("/sessions/{session_id}/swap")
async def swap_exercise(session_id: int, request: SwapExerciseRequest, user: dict = Depends(get_current_profile)):
    return ok(await workout_editing.swap_exercise(user, session_id, request.exercise_id))


@router.post("/accessory")
async def add_accessory(request: AddAccessoryRequest, user: dict = Depends(get_current_profile)):
    added = await workout_editing.add_accessory(user, request.body_part, request.count, request.reference_date)
    return ok(added)


@router.post("/sets/{set_id}/complete", response_model=Envelope[ExerciseSet])
async def complete_set(set_id: int, request: CompleteSetRequest, user: dict = Depends(get_current_profile)):
    return ok(await workout_editing.complete_set(user, set_id, request))
