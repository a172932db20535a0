# utils/jwt_handler.py

from fastapi import HTTPException, status
from jose import JWTError, jwt

from fitcoach.core.config import ALGORITHM, SECRET_KEY


# Token verification: returns the external identity reference ("sub")
def verify_token(token: str) -> str:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception
    external_id = payload.get("sub")
    if external_id is None:
        raise credentials_exception
    return external_id


credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials.",
    headers={"WWW-Authenticate": "Bearer"},
)
