from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

DATE_KEY_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class MemoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    date_key: Optional[str] = Field(None, pattern=DATE_KEY_PATTERN, description="Defaults to today's date key")
    image_path: Optional[str] = Field(None, max_length=500, description="Storage key of an already uploaded photo")


class MemoryResponse(BaseModel):
    id: int
    uuid: str
    room_id: int
    created_by_id: int
    title: str
    description: Optional[str]
    date_key: str
    image_path: Optional[str]
    created_at: datetime
    is_favorite: bool = False

    class Config:
        from_attributes = True


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    date_key: Optional[str] = Field(None, pattern=DATE_KEY_PATTERN)


class MilestoneResponse(BaseModel):
    id: int
    room_id: int
    created_by_id: int
    title: str
    description: Optional[str]
    date_key: str
    created_at: datetime

    class Config:
        from_attributes = True


class NudgeCreate(BaseModel):
    emoji: str = Field(..., min_length=1, max_length=16)
    message: Optional[str] = Field(None, max_length=280)


class NudgeResponse(BaseModel):
    id: int
    room_id: int
    sender_id: int
    emoji: str
    message: Optional[str]
    date_key: str
    seen_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class MoodCheckinCreate(BaseModel):
    mood: str = Field(..., min_length=1, max_length=32)
    note: Optional[str] = Field(None, max_length=1000)


class MoodCheckinResponse(BaseModel):
    id: int
    room_id: int
    profile_id: int
    mood: str
    note: Optional[str]
    date_key: str
    created_at: datetime

    class Config:
        from_attributes = True


class DailyLogCreate(BaseModel):
    text: Optional[str] = Field(None, max_length=5000)
    image_path: Optional[str] = Field(None, max_length=500)
    date_key: Optional[str] = Field(None, pattern=DATE_KEY_PATTERN)


class DailyLogResponse(BaseModel):
    id: int
    room_id: int
    author_id: int
    date_key: str
    text: Optional[str]
    image_path: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class RecapResponse(BaseModel):
    """Counts for one calendar year or month of a room."""
    year: int
    month: Optional[int] = None
    start_key: str
    end_key: str
    questions_completed: int
    nudges_sent: int
    mood_checkins: int
    memories: int
    milestones: int
    dates_completed: int
