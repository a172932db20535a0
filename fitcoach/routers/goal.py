# routers/goal.py
from fastapi import APIRouter, Depends

from fitcoach.core.responses import ok
from fitcoach.crud import goal as goal_crud
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.goal import Goal, GoalCreate, GoalUpdate
from fitcoach.services import program

router = APIRouter(prefix="/goals", tags=["goals"])


@router.get("", response_model=Envelope[list[Goal]])
async def list_goals(user: dict = Depends(get_current_profile)):
    return ok(await goal_crud.get_user_goals(user["id"]))


@router.get("/active", response_model=Envelope[Goal])
async def read_active_goal(user: dict = Depends(get_current_profile)):
    return ok(await goal_crud.get_active_goal(user["id"]))


@router.post("", response_model=Envelope[Goal])
async def create_goal(goal: GoalCreate, user: dict = Depends(get_current_profile)):
    """The new goal becomes the only active one. Strength targets must be primary lifts."""
    return ok(await program.create_goal(user, goal))


@router.put("/{goal_id}", response_model=Envelope[Goal])
async def update_goal(goal_id: int, update: GoalUpdate, user: dict = Depends(get_current_profile)):
    return ok(await program.update_goal(user, goal_id, update))


@router.post("/{goal_id}/activate", response_model=Envelope[Goal])
async def activate_goal(goal_id: int, user: dict = Depends(get_current_profile)):
    return ok(await program.activate_goal(user, goal_id))


@router.post("/{goal_id}/complete")
async def complete_goal(goal_id: int, user: dict = Depends(get_current_profile)):
    removed = await program.complete_goal(user, goal_id)
    return ok({"goal_id": goal_id, "removed_sessions": removed})


@router.delete("/{goal_id}")
async def delete_goal(goal_id: int, user: dict = Depends(get_current_profile)):
    await program.delete_goal(user, goal_id)
    return ok({"goal_id": goal_id})
