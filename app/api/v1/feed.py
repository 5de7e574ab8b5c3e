from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.dependencies import get_current_profile, get_current_room
from app.models.profile import Profile
from app.models.room import Room
from app.schemas.feed import FeedPage
from app.schemas.result import Result
from app.services.feed_service import FeedService

router = APIRouter()


@router.get("", response_model=Result[FeedPage])
async def get_feed(
    before: Optional[str] = Query(None, description="next_cursor of the previous page"),
    page_size: Optional[int] = Query(None, ge=1, le=50),
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """One page of the inbox, newest day first."""
    service = FeedService(db)
    page = service.build_feed(current_room, current_profile, before=before, page_size=page_size)
    return Result.successful(data=page)
