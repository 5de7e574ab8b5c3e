from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_profile, get_current_room
from app.models.profile import Profile
from app.models.room import Room
from app.schemas.activity import ProgressResponse
from app.schemas.result import Result
from app.services.activity_service import ActivityService

router = APIRouter()


@router.get("", response_model=Result[ProgressResponse])
async def get_progress(
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Streaks, the 90-day heatmap and time together."""
    service = ActivityService(db)
    return Result.successful(data=service.get_progress(current_room, current_profile))
