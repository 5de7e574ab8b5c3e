from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ProfileBase(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100, description="Name shown to the partner")
    locale: str = Field("en", min_length=2, max_length=10, description="Notification language, e.g. 'en' or 'no'")


class ProfileCreate(ProfileBase):
    """Schema for registering the profile of an upstream-authenticated user."""
    pass


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)
    locale: Optional[str] = Field(None, min_length=2, max_length=10)


class ProfileResponse(ProfileBase):
    id: int
    uuid: str
    created_at: datetime

    class Config:
        from_attributes = True
