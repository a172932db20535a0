# routers/chat.py
from fastapi import APIRouter, Depends, Query

from fitcoach.core.responses import ok
from fitcoach.crud.chat import get_chat_history
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.chat import ChatCommand, ChatHistory, ChatResponse
from fitcoach.schemas.common import Envelope
from fitcoach.services import chat

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/command", response_model=Envelope[ChatResponse])
async def chat_command(command: ChatCommand, user: dict = Depends(get_current_profile)):
    """Run a free-text command against the user's plan and return the confirmation."""
    return ok(await chat.handle_command(user, command.message, command.date))


@router.get("/history", response_model=Envelope[list[ChatHistory]])
async def read_chat_history(limit: int = Query(default=50, ge=1, le=200), user: dict = Depends(get_current_profile)):
    return ok(await get_chat_history(user["id"], limit))
