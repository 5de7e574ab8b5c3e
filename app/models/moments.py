from sqlalchemy import String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional
from datetime import datetime
from app.models.base import BaseModel, RoomScoped, DATE_KEY_LENGTH


class Milestone(RoomScoped, BaseModel):
    __tablename__ = "milestones"

    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)


class Memory(RoomScoped, BaseModel):
    __tablename__ = "memories"

    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)
    # Storage key of an uploaded photo; the upload itself happens elsewhere
    image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, default=None)


class MemoryFavorite(BaseModel):
    __tablename__ = "memory_favorites"
    __table_args__ = (
        UniqueConstraint("memory_id", "profile_id", name="uq_memory_favorite"),
    )

    memory_id: Mapped[int] = mapped_column(
        ForeignKey("memories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )


class MoodCheckin(RoomScoped, BaseModel):
    __tablename__ = "mood_checkins"

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    mood: Mapped[str] = mapped_column(String(32), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)


class Nudge(RoomScoped, BaseModel):
    """A small affection ping from one partner to the other."""

    __tablename__ = "nudges"

    sender_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    emoji: Mapped[str] = mapped_column(String(16), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(String(280), nullable=True, default=None)
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)
    seen_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, default=None)


class DailyLog(RoomScoped, BaseModel):
    """Journal entry. The feed groups these by (author, date_key)."""

    __tablename__ = "daily_logs"

    author_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)
    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    image_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, default=None)
