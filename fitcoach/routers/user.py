# routers/user.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from svix.webhooks import Webhook, WebhookVerificationError

from fitcoach.core.config import CLERK_WEBHOOK_SECRET
from fitcoach.core.responses import ok
from fitcoach.crud.user import sync_user, update_profile
from fitcoach.dependencies import get_current_profile
from fitcoach.schemas.common import Envelope
from fitcoach.schemas.user import ProfileUpdate, UserProfile, UserSync

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

SYNC_EVENTS = ("user.created", "user.updated")


def user_sync_from_event(data: dict) -> UserSync:
    """Map an identity-provider user payload onto our user fields."""
    primary_id = data.get("primary_email_address_id")
    addresses = data.get("email_addresses") or []
    email = next((a.get("email_address") for a in addresses if a.get("id") == primary_id), None)
    if email is None and addresses:
        email = addresses[0].get("email_address")
    name = " ".join(part for part in (data.get("first_name"), data.get("last_name")) if part)
    return UserSync(
        external_id=data["id"],
        name=name or data.get("username") or "",
        email=email or "",
        avatar=data.get("image_url"),
    )


@router.post("/clerk-webhook")
async def clerk_webhook(request: Request):
    if not CLERK_WEBHOOK_SECRET:
        raise HTTPException(status_code=500, detail="Webhook secret is not configured")

    payload = await request.body()
    try:
        event = Webhook(CLERK_WEBHOOK_SECRET).verify(payload, dict(request.headers))
    except WebhookVerificationError:
        raise HTTPException(status_code=400, detail="Invalid webhook signature")

    event_type = event.get("type")
    if event_type not in SYNC_EVENTS:
        logger.info("Ignoring webhook event %s", event_type)
        return ok({"synced": False, "type": event_type})

    data = event.get("data") or {}
    if not data.get("id"):
        raise HTTPException(status_code=400, detail="Webhook payload has no user id")
    user = await sync_user(user_sync_from_event(data))
    logger.info("Synced user %s from %s", user["id"], event_type)
    return ok({"synced": True, "type": event_type, "user_id": user["id"]})


@router.get("/users/me", response_model=Envelope[UserProfile])
async def read_me(user: dict = Depends(get_current_profile)):
    return ok(user)


@router.put("/users/me", response_model=Envelope[UserProfile])
async def update_me(update: ProfileUpdate, user: dict = Depends(get_current_profile)):
    return ok(await update_profile(user["id"], update))
