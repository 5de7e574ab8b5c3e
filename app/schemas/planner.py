from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import datetime


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=200)
    start_at: datetime = Field(..., description="Start time; its business day becomes the event's date key")
    end_at: Optional[datetime] = None
    all_day: bool = False
    reminder_at: Optional[datetime] = Field(None, description="When to push a reminder to both members")

    @model_validator(mode="after")
    def check_end_after_start(self):
        if self.end_at is not None and self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self


class EventCreate(EventBase):
    pass


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = Field(None, max_length=200)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    all_day: Optional[bool] = None
    reminder_at: Optional[datetime] = None


class EventResponse(BaseModel):
    id: int
    uuid: str
    room_id: int
    created_by_id: int
    title: str
    description: Optional[str]
    location: Optional[str]
    start_at: datetime
    end_at: Optional[datetime]
    all_day: bool
    date_key: str
    reminder_at: Optional[datetime]
    reminder_sent_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)
    due_at: Optional[datetime] = None
    reminder_at: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)
    due_at: Optional[datetime] = None
    reminder_at: Optional[datetime] = None


class TaskResponse(BaseModel):
    id: int
    uuid: str
    room_id: int
    created_by_id: int
    title: str
    notes: Optional[str]
    due_at: Optional[datetime]
    due_date_key: Optional[str]
    is_done: bool
    completed_at: Optional[datetime]
    reminder_at: Optional[datetime]
    reminder_sent_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class DateIdeaCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    category: str = Field("other", min_length=1, max_length=50)


class DateIdeaResponse(BaseModel):
    id: int
    room_id: Optional[int]
    title: str
    description: Optional[str]
    category: str

    class Config:
        from_attributes = True


class DatePlanRequest(BaseModel):
    """Schedule a date idea: creates the calendar event and the plan together."""
    start_at: datetime
    end_at: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=200)
    reminder_at: Optional[datetime] = None


class DateCompletionResponse(BaseModel):
    id: int
    room_id: int
    date_idea_id: int
    event_id: Optional[int]
    created_by_id: int
    date_key: str
    completed_at: Optional[datetime]
    date_idea: DateIdeaResponse

    class Config:
        from_attributes = True


class DatePlanResponse(BaseModel):
    event: EventResponse
    plan: DateCompletionResponse
