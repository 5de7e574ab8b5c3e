from sqlalchemy import String, Text, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, TYPE_CHECKING
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.profile import Profile


class Notification(BaseModel):
    """In-app notification shown in the notifications list."""

    __tablename__ = "notifications"

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False, default="default")
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    body: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, default=None)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class PushSubscription(BaseModel):
    """A browser push endpoint registered by one profile."""

    __tablename__ = "push_subscriptions"

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    endpoint: Mapped[str] = mapped_column(String(1000), unique=True, nullable=False)
    p256dh: Mapped[str] = mapped_column(String(255), nullable=False)
    auth: Mapped[str] = mapped_column(String(255), nullable=False)

    profile: Mapped["Profile"] = relationship(
        "Profile", back_populates="push_subscriptions", lazy="selectin"
    )

    def as_subscription_info(self) -> dict:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
