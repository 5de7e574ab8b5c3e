from sqlalchemy.orm import Session
from sqlalchemy import delete, update
from typing import List, Optional
from app.models.notification import Notification, PushSubscription
from app.repositories.repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):

    def __init__(self, db: Session):
        super().__init__(Notification, db)

    def list_for_profile(self, profile_id: int, limit: int = 50) -> List[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.profile_id == profile_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )

    def get_for_profile(self, id: int, profile_id: int) -> Optional[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.id == id, Notification.profile_id == profile_id)
            .first()
        )

    def mark_all_read(self, profile_id: int) -> int:
        result = self.db.execute(
            update(Notification)
            .where(Notification.profile_id == profile_id, Notification.read.is_(False))
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def count_unread(self, profile_id: int) -> int:
        return (
            self.db.query(Notification)
            .filter(Notification.profile_id == profile_id, Notification.read.is_(False))
            .count()
        )


class PushSubscriptionRepository(BaseRepository[PushSubscription]):

    def __init__(self, db: Session):
        super().__init__(PushSubscription, db)

    def list_for_profile(self, profile_id: int) -> List[PushSubscription]:
        return (
            self.db.query(PushSubscription)
            .filter(PushSubscription.profile_id == profile_id)
            .order_by(PushSubscription.id)
            .all()
        )

    def get_by_endpoint(self, endpoint: str) -> Optional[PushSubscription]:
        return self.db.query(PushSubscription).filter(PushSubscription.endpoint == endpoint).first()

    def delete_endpoints(self, profile_id: int, endpoints: List[str]) -> int:
        """Remove the given endpoints of one profile. Returns the number removed."""
        if not endpoints:
            return 0
        result = self.db.execute(
            delete(PushSubscription)
            .where(
                PushSubscription.profile_id == profile_id,
                PushSubscription.endpoint.in_(endpoints),
            )
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount
