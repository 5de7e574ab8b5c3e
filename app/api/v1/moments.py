from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.dependencies import get_current_profile, get_current_room
from app.models.profile import Profile
from app.models.room import Room
from app.schemas.moments import (
    DATE_KEY_PATTERN,
    DailyLogCreate,
    DailyLogResponse,
    MemoryCreate,
    MemoryResponse,
    MilestoneCreate,
    MilestoneResponse,
    MoodCheckinCreate,
    MoodCheckinResponse,
    NudgeCreate,
    NudgeResponse,
    RecapResponse,
)
from app.schemas.result import Result
from app.services.moments_service import MomentsService

router = APIRouter()


# Memories

@router.get("/memories", response_model=Result[List[MemoryResponse]])
async def list_memories(
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.list_memories(current_room, current_profile))


@router.post("/memories", response_model=Result[MemoryResponse], status_code=status.HTTP_201_CREATED)
async def create_memory(
    memory_data: MemoryCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.create_memory(current_room, current_profile, memory_data))


@router.get("/memories/{memory_id}", response_model=Result[MemoryResponse])
async def get_memory(
    memory_id: int,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.get_memory(current_room, current_profile, memory_id))


@router.delete("/memories/{memory_id}", response_model=Result[dict])
async def delete_memory(
    memory_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    service.delete_memory(current_room, memory_id)
    return Result.successful(data={"message": "Memory deleted successfully"})


@router.post("/memories/{memory_id}/favorite", response_model=Result[MemoryResponse])
async def toggle_favorite(
    memory_id: int,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Favourite a memory, or unfavourite it if it already is one."""
    service = MomentsService(db)
    return Result.successful(data=service.toggle_favorite(current_room, current_profile, memory_id))


# Milestones

@router.get("/milestones", response_model=Result[List[MilestoneResponse]])
async def list_milestones(
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.list_milestones(current_room))


@router.post("/milestones", response_model=Result[MilestoneResponse], status_code=status.HTTP_201_CREATED)
async def create_milestone(
    milestone_data: MilestoneCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.create_milestone(current_room, current_profile, milestone_data))


@router.delete("/milestones/{milestone_id}", response_model=Result[dict])
async def delete_milestone(
    milestone_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    service.delete_milestone(current_room, milestone_id)
    return Result.successful(data={"message": "Milestone deleted successfully"})


# Nudges

@router.post("/nudges", response_model=Result[NudgeResponse], status_code=status.HTTP_201_CREATED)
async def send_nudge(
    nudge_data: NudgeCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Send a nudge; the partner gets a notification."""
    service = MomentsService(db)
    return Result.successful(data=service.send_nudge(current_room, current_profile, nudge_data))


@router.get("/nudges", response_model=Result[List[NudgeResponse]])
async def list_nudges(
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.list_nudges(current_room))


@router.post("/nudges/seen", response_model=Result[dict])
async def mark_nudges_seen(
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Mark every unseen nudge from the partner as seen."""
    service = MomentsService(db)
    return Result.successful(data={"updated": service.mark_nudges_seen(current_room, current_profile)})


# Mood check-ins

@router.post("/moods", response_model=Result[MoodCheckinResponse], status_code=status.HTTP_201_CREATED)
async def create_mood(
    mood_data: MoodCheckinCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.create_mood(current_room, current_profile, mood_data))


@router.get("/moods", response_model=Result[List[MoodCheckinResponse]])
async def list_moods(
    start: Optional[str] = Query(None, pattern=DATE_KEY_PATTERN),
    end: Optional[str] = Query(None, pattern=DATE_KEY_PATTERN),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.list_moods(current_room, start, end))


# Journal

@router.post("/journal", response_model=Result[DailyLogResponse], status_code=status.HTTP_201_CREATED)
async def create_journal_entry(
    log_data: DailyLogCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.create_log(current_room, current_profile, log_data))


@router.get("/journal", response_model=Result[List[DailyLogResponse]])
async def list_journal_entries(
    date_key: Optional[str] = Query(None, pattern=DATE_KEY_PATTERN),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.list_logs(current_room, date_key))


# Recap

@router.get("/recap/{year}", response_model=Result[RecapResponse])
async def get_year_recap(
    year: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.get_recap(current_room, year))


@router.get("/recap/{year}/{month}", response_model=Result[RecapResponse])
async def get_month_recap(
    year: int,
    month: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = MomentsService(db)
    return Result.successful(data=service.get_recap(current_room, year, month))
