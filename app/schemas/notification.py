from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class NotificationResponse(BaseModel):
    id: int
    kind: str
    title: str
    body: Optional[str]
    url: Optional[str]
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PushKeys(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class PushSubscriptionCreate(BaseModel):
    """The JSON a browser's PushSubscription serializes to."""
    endpoint: str = Field(..., min_length=1, max_length=1000)
    keys: PushKeys


class PushSubscriptionResponse(BaseModel):
    id: int
    endpoint: str
    created_at: datetime

    class Config:
        from_attributes = True


class PushContent(BaseModel):
    """What a push shows on the device."""
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1, max_length=1000)
    url: Optional[str] = Field(None, max_length=500)
    tag: Optional[str] = Field(None, max_length=200)
    badge: Optional[int] = Field(None, ge=0)


class PushMessage(PushContent):
    """A push to every registered device of one profile."""
    user_id: str = Field(..., min_length=1, description="Public uuid of the target profile")


class DispatchResult(BaseModel):
    sent: int = 0
    failed: int = 0
    cleaned: int = 0
