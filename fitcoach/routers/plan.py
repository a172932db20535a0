# routers/plan.py
from fastapi import APIRouter, Depends

from fitcoach.core.exceptions import NotFoundError
from fitcoach.core.responses import ok
from fitcoach.crud import plan as plan_crud
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.plan import Plan, StorePlanRequest
from fitcoach.services import program

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=Envelope[list[Plan]])
async def list_plans(user: dict = Depends(get_current_profile)):
    return ok(await plan_crud.get_user_plans(user["id"]))


@router.get("/active", response_model=Envelope[Plan])
async def read_active_plan(user: dict = Depends(get_current_profile)):
    return ok(await plan_crud.get_active_plan(user["id"]))


@router.get("/{plan_id}", response_model=Envelope[Plan])
async def read_plan(plan_id: int, user: dict = Depends(get_current_profile)):
    plan = await plan_crud.get_plan(plan_id)
    if plan is None or plan["user_id"] != user["id"]:
        raise NotFoundError(f"Plan {plan_id} not found")
    return ok(plan)


@router.post("", response_model=Envelope[Plan])
async def store_plan(request: StorePlanRequest, user: dict = Depends(get_current_profile)):
    """Store a strategy as the user's only active plan."""
    return ok(await program.store_plan(user, request))


@router.post("/{plan_id}/activate", response_model=Envelope[Plan])
async def activate_plan(plan_id: int, user: dict = Depends(get_current_profile)):
    return ok(await program.activate_plan(user, plan_id))
