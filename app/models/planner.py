from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional
from datetime import datetime
from app.models.base import BaseModel, RoomScoped, DATE_KEY_LENGTH


class SharedEvent(RoomScoped, BaseModel):
    """
    Calendar item for the room.

    reminder_sent_at is the reminder guard: it goes from NULL to a timestamp
    exactly once, through a conditional update.
    """

    __tablename__ = "shared_events"

    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    location: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, default=None)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    all_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)

    reminder_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, index=True
    )
    reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )


class SharedTask(RoomScoped, BaseModel):
    __tablename__ = "shared_tasks"

    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    due_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    due_date_key: Mapped[Optional[str]] = mapped_column(
        String(DATE_KEY_LENGTH), nullable=True, default=None, index=True
    )
    is_done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, default=None)

    reminder_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None, index=True
    )
    reminder_sent_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )


class DateIdea(BaseModel):
    """Date suggestion. room_id NULL means it belongs to the shared catalogue."""

    __tablename__ = "date_ideas"

    room_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="other")


class DateCompletion(RoomScoped, BaseModel):
    """A date idea the room planned (and later marked done)."""

    __tablename__ = "date_completions"

    date_idea_id: Mapped[int] = mapped_column(
        ForeignKey("date_ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("shared_events.id", ondelete="SET NULL"), nullable=True
    )
    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, default=None)

    date_idea: Mapped["DateIdea"] = relationship("DateIdea", lazy="selectin")
