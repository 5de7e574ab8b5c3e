from sqlalchemy import String, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, DeclarativeBase, declared_attr
from typing import Optional
from datetime import datetime
import uuid


class Base(DeclarativeBase):
    """Base class for all models"""
    pass


class BaseModel(Base):

    __abstract__ = True

    id: Mapped[int] = mapped_column(primary_key=True, index=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(
        String(36),
        default=lambda: str(uuid.uuid4()),
        unique=True,
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True
    )


class RoomScoped:
    """Mixin for rows owned by exactly one room."""

    @declared_attr
    def room_id(cls) -> Mapped[int]:
        return mapped_column(
            ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True
        )


# Calendar date string (YYYY-MM-DD) of the business day a row belongs to
DATE_KEY_LENGTH = 10
