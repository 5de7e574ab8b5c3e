from sqlalchemy import String
from sqlalchemy.orm import relationship, Mapped, mapped_column
from typing import Optional, List, TYPE_CHECKING
from app.models.base import BaseModel
from app.models.associations import room_members
if TYPE_CHECKING:
    from app.models.room import Room
    from app.models.notification import PushSubscription


class Profile(BaseModel):
    """
    A person using the app. Identity itself lives with the auth provider;
    the public uuid is what callers present in the X-User-Id header.
    """

    __tablename__ = "profiles"

    display_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, default=None)
    locale: Mapped[str] = mapped_column(String(10), nullable=False, default="en")

    rooms: Mapped[List["Room"]] = relationship(
        "Room",
        secondary=room_members,
        back_populates="members",
        lazy="selectin"
    )
    push_subscriptions: Mapped[List["PushSubscription"]] = relationship(
        "PushSubscription",
        back_populates="profile",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    @property
    def room(self) -> Optional["Room"]:
        return self.rooms[0] if self.rooms else None
