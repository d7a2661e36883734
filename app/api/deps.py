# app/api/deps.py
from typing import Optional

from fastapi import Depends, Header

from ..errors import UnauthorizedError
from ..schemas import ActingUser
from ..security import decode_access_token, get_bearer_token


def get_optional_user(authorization: Optional[str] = Header(None)) -> Optional[ActingUser]:
    """Resolve the acting user from a bearer token, or None when no token is sent.

    A token that is present but invalid is rejected outright.
    """
    token = get_bearer_token(authorization)
    if not token:
        return None
    payload = decode_access_token(token)
    if not payload:
        raise UnauthorizedError("Invalid token")
    try:
        return ActingUser(id=int(payload["sub"]), role=payload.get("role") or "user")
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid token")


def get_current_user(user: Optional[ActingUser] = Depends(get_optional_user)) -> ActingUser:
    if user is None:
        raise UnauthorizedError("Missing token")
    return user
