# routers/exercise.py
from typing import Optional

from fastapi import APIRouter, Depends

from fitcoach.core.exceptions import NotFoundError
from fitcoach.core.responses import ok
from fitcoach.crud import exercise as exercise_crud
from fitcoach.dependencies import get_current_user
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.workout import Exercise, ExerciseCreate

router = APIRouter(prefix="/exercises", tags=["exercises"])


@router.get("", response_model=Envelope[list[Exercise]])
async def list_exercises(body_part: Optional[str] = None, current_user: dict = Depends(get_current_user)):
    return ok(await exercise_crud.list_exercises(body_part))


@router.get("/body-parts", response_model=Envelope[list[str]])
async def list_body_parts(current_user: dict = Depends(get_current_user)):
    return ok(await exercise_crud.list_body_parts())


@router.get("/{exercise_id}", response_model=Envelope[Exercise])
async def read_exercise(exercise_id: int, current_user: dict = Depends(get_current_user)):
    exercise = await exercise_crud.get_exercise(exercise_id)
    if exercise is None:
        raise NotFoundError(f"Exercise {exercise_id} not found")
    return ok(exercise)


@router.post("", response_model=Envelope[Exercise])
async def create_exercise(exercise: ExerciseCreate, current_user: dict = Depends(get_current_user)):
    return ok(await exercise_crud.create_exercise(exercise))


@router.post("/import", response_model=Envelope[list[Exercise]])
async def import_exercises(exercises: list[ExerciseCreate], current_user: dict = Depends(get_current_user)):
    return ok([await exercise_crud.create_exercise(exercise) for exercise in exercises])
