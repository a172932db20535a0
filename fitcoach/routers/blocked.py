# routers/blocked.py
from typing import Literal, Optional

from fastapi import APIRouter, Depends

from fitcoach.core.responses import ok
from fitcoach.crud import blocked as blocked_crud
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.blocked import BlockItemRequest

router = APIRouter(prefix="/blocked-items", tags=["blocked items"])


@router.get("")
async def list_blocked(
    item_type: Optional[Literal["exercise", "meal"]] = None,
    user: dict = Depends(get_current_profile),
):
    return ok(await blocked_crud.get_blocked_items(user["id"], item_type))


@router.post("")
async def block_item(request: BlockItemRequest, user: dict = Depends(get_current_profile)):
    """Blocked items are never picked again by generation or meal regeneration."""
    created = await blocked_crud.block_item(user["id"], request.item_type, request.item_id, request.item_name)
    return ok({"blocked": created, "item_type": request.item_type, "item_id": request.item_id})


@router.delete("/{blocked_id}")
async def unblock_item(blocked_id: int, user: dict = Depends(get_current_profile)):
    await blocked_crud.unblock_item(user["id"], blocked_id)
    return ok({"id": blocked_id})
