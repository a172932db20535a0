# routers/program.py
from typing import Any

from fastapi import APIRouter, Depends

from fitcoach.core.responses import ok
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.meal import ImportResult
from fitcoach.schemas.plan import (
    AddMealRequest,
    GenerateProgramRequest,
    Plan,
    RemoveMealRequest,
    UpdateMealRequest,
)
from fitcoach.services import nutrition, program

router = APIRouter(tags=["program"])


@router.post("/generate-program")
async def generate_program(request: GenerateProgramRequest, user: dict = Depends(get_current_profile)):
    """Create a goal from the free-text statement and store a generated strategy and diet plan for it."""
    return ok(await program.generate_program(user, request))


@router.post("/add-meal", response_model=Envelope[Plan])
async def add_meal(request: AddMealRequest, user: dict = Depends(get_current_profile)):
    return ok(await nutrition.add_plan_meal(user, request.plan_id, request.meal))


@router.post("/update-meal", response_model=Envelope[Plan])
async def update_meal(request: UpdateMealRequest, user: dict = Depends(get_current_profile)):
    return ok(await nutrition.update_plan_meal(user, request))


@router.post("/remove-meal", response_model=Envelope[Plan])
async def remove_meal(request: RemoveMealRequest, user: dict = Depends(get_current_profile)):
    return ok(await nutrition.remove_plan_meal(user, request.plan_id, request.meal_index))


@router.post("/import-meals", response_model=Envelope[ImportResult])
async def import_meals(items: list[Any], user: dict = Depends(get_current_profile)):
    # items are validated one by one so a bad entry does not reject the batch
    return ok(await nutrition.import_meals(items))
