from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime


class RoomJoinRequest(BaseModel):
    """Schema for joining a partner's room via invite code."""
    invite_code: str = Field(..., min_length=8, max_length=20, description="Room invite code")


class AnniversaryUpdate(BaseModel):
    anniversary_date: Optional[date] = Field(None, description="Date the couple got together; null clears it")


class RoomMemberResponse(BaseModel):
    profile_id: int
    uuid: str
    display_name: Optional[str]
    locale: str
    joined_at: datetime

    class Config:
        from_attributes = True


class RoomResponse(BaseModel):
    id: int
    uuid: str
    invite_code: str
    anniversary_date: Optional[date]
    created_by_id: int
    created_at: datetime
    member_count: Optional[int] = None
    members: Optional[List[RoomMemberResponse]] = None

    class Config:
        from_attributes = True
