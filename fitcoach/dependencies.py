# dependencies.py

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from fitcoach.crud.user import get_user_by_external_id
from fitcoach.utils.jwt_handler import verify_token

# Tokens come from the external identity provider; there is no local login route.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="users/login")


async def get_current_user(token: str = Depends(oauth2_scheme)):
    return {"user_id": verify_token(token)}


async def get_current_profile(current_user: dict = Depends(get_current_user)) -> dict:
    """The stored user row behind the bearer token."""
    user = await get_user_by_external_id(current_user["user_id"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found. Sync the account first.")
    return user
