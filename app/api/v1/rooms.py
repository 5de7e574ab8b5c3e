from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.dependencies import get_current_profile, get_current_room
from app.models.profile import Profile
from app.models.room import Room
from app.schemas.room import (
    AnniversaryUpdate,
    RoomJoinRequest,
    RoomMemberResponse,
    RoomResponse,
)
from app.schemas.result import Result
from app.services.room_service import RoomService

router = APIRouter()


@router.post("", response_model=Result[RoomResponse], status_code=status.HTTP_201_CREATED)
async def create_room(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Create a room with the caller as its first member."""
    service = RoomService(db)
    return Result.successful(data=service.create_room(current_profile))


@router.post("/join", response_model=Result[RoomResponse])
async def join_room(
    join_data: RoomJoinRequest,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Join a partner's room using their invite code."""
    service = RoomService(db)
    return Result.successful(data=service.join_room(current_profile, join_data.invite_code))


@router.get("/me", response_model=Result[RoomResponse])
async def get_my_room(
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Get the caller's room with its members."""
    service = RoomService(db)
    return Result.successful(data=service.to_response(current_room))


@router.get("/me/members", response_model=Result[List[RoomMemberResponse]])
async def get_members(
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = RoomService(db)
    return Result.successful(data=service.get_members(current_room))


@router.put("/me/anniversary", response_model=Result[RoomResponse])
async def set_anniversary(
    anniversary_data: AnniversaryUpdate,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Set or clear the date anniversary reminders are based on."""
    service = RoomService(db)
    return Result.successful(data=service.set_anniversary(current_room, anniversary_data))
