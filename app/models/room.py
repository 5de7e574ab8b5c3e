from sqlalchemy import String, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import date
from app.models.base import BaseModel
from app.models.associations import room_members

if TYPE_CHECKING:
    from app.models.profile import Profile


MAX_ROOM_MEMBERS = 2


class Room(BaseModel):
    """
    The two-person space every other record belongs to.
    Created on sign-up; there is no delete path.
    """

    __tablename__ = "rooms"

    invite_code: Mapped[str] = mapped_column(
        String(20), unique=True, index=True, nullable=False
    )
    anniversary_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, default=None
    )

    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )

    members: Mapped[List["Profile"]] = relationship(
        "Profile", secondary=room_members, back_populates="rooms", lazy="selectin"
    )

    @property
    def is_full(self) -> bool:
        return len(self.members) >= MAX_ROOM_MEMBERS
