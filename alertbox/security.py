"""Actor resolution for alert endpoints.

Authentication happens upstream; the caller's identity arrives as a user id
header and is resolved to an ``Actor`` here.
"""
from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from alertbox.config import ACTOR_HEADER
from alertbox.db import get_db
from alertbox.models.user import User
from alertbox.schemas.user import Actor
from alertbox.utils.errors import error_response


def _extract_user_id(x_user_id: str | None = Header(default=None, alias=ACTOR_HEADER)) -> int | None:
    if x_user_id is None or not x_user_id.strip():
        return None
    try:
        return int(x_user_id.strip())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNKNOWN_ACTOR", f"{ACTOR_HEADER} must be a user id."),
        ) from None


def require_actor(
    db: Session = Depends(get_db),
    user_id: int | None = Depends(_extract_user_id),
) -> Actor:
    """Return the acting user, or 401 when it is missing, unknown or inactive."""

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_ACTOR", f"{ACTOR_HEADER} header required."),
        )

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNKNOWN_ACTOR", "Unknown or inactive user."),
        )
    return Actor.from_user(user)


__all__ = ["require_actor"]
