"""Module: deps."""

from datetime import datetime

from fastapi import Depends, Header, HTTPException

from medsguardian.db.models.user import User
from medsguardian.db.session import SessionLocal
from medsguardian.services.events import change_feed
from medsguardian.services.sessions import SessionRegistry, sessions
from medsguardian.services.storage import Storage


# Dependency provider: storage bound to the process-wide session factory.
def get_storage() -> Storage:
    return Storage(SessionLocal, change_feed)


def get_sessions() -> SessionRegistry:
    return sessions


# Wall-clock "now" for dose states; overridden in tests.
def get_now() -> datetime:
    return datetime.now()


def get_token(authorization: str | None = Header(default=None)) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid Authorization header")

    return parts[1].strip()


def get_current_user(
    token: str = Depends(get_token),
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_sessions),
) -> User:
    user_id = registry.resolve(token)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    return user
