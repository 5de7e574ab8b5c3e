import secrets
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .database import get_db
from app.models.profile import Profile
from app.models.room import Room
from app.repositories.profile_repository import ProfileRepository
from app.repositories.room_repository import RoomRepository
from .config import require_settings, settings
from .core.exception import AuthenticationException, AuthorizationException


async def get_caller_uuid(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Identity of the caller as established by the auth gateway in front of
    this service, passed on in the X-User-Id header.
    """
    if not x_user_id or not x_user_id.strip():
        raise AuthenticationException("Missing X-User-Id header")
    return x_user_id.strip()


async def get_current_profile(
    user_uuid: str = Depends(get_caller_uuid), db: Session = Depends(get_db)
) -> Profile:
    """
    Dependency to get the calling profile.

    Example:
        @router.get("/me")
        async def me(profile: Profile = Depends(get_current_profile)):
            return {"profile_id": profile.id}
    """
    profile = ProfileRepository(db).get_by_uuid(user_uuid)
    if profile is None:
        raise AuthenticationException("No profile exists for this user yet")
    return profile


async def get_current_room(
    profile: Profile = Depends(get_current_profile), db: Session = Depends(get_db)
) -> Room:
    """The room of the caller; every room-scoped route depends on this."""
    room = RoomRepository(db).get_room_for_profile(profile.id)
    if room is None:
        raise AuthorizationException("You are not a member of a room yet")
    return room


async def require_service_role(authorization: Optional[str] = Header(None)) -> None:
    """Guard for job and dispatch endpoints called by the scheduler."""
    require_settings("SERVICE_ROLE_KEY")

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(
        token.strip().encode(), settings.SERVICE_ROLE_KEY.encode()
    ):
        raise AuthenticationException("Invalid service credentials")
