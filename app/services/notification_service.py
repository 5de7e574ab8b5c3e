import json
import logging
from typing import Callable, List, Optional

from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from app.config import require_settings, settings
from app.core.exception import ResourceNotFoundException
from app.models.notification import Notification, PushSubscription
from app.models.profile import Profile
from app.repositories.notification_repository import (
    NotificationRepository,
    PushSubscriptionRepository,
)
from app.repositories.profile_repository import ProfileRepository
from app.schemas.notification import (
    DispatchResult,
    NotificationResponse,
    PushContent,
    PushMessage,
    PushSubscriptionCreate,
    PushSubscriptionResponse,
)

logger = logging.getLogger(__name__)

# Push services answer these for subscriptions that no longer exist
GONE_STATUS_CODES = (404, 410)
PUSH_TTL_SECONDS = 86400

PushSender = Callable[..., object]


class NotificationService:
    """
    In-app notifications and Web Push delivery.

    The push sender defaults to pywebpush.webpush; tests pass their own.
    """

    def __init__(self, db: Session, sender: Optional[PushSender] = None):
        self.db = db
        self.sender = sender or webpush
        self.notification_repo = NotificationRepository(db)
        self.subscription_repo = PushSubscriptionRepository(db)
        self.profile_repo = ProfileRepository(db)

    # Push dispatch

    def send_push(self, profile_id: int, message: PushContent) -> DispatchResult:
        """
        Deliver a message to every push endpoint registered by one profile.

        Each endpoint is tried once and independently. Endpoints the push
        service reports as gone are counted as failed and deleted after the
        fan-out; any other failure keeps the endpoint.

        Raises:
            MissingConfigurationException: if the VAPID key pair is not set
        """
        require_settings("VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY")

        result = DispatchResult()
        subscriptions = self.subscription_repo.list_for_profile(profile_id)
        if not subscriptions:
            return result

        payload = json.dumps(
            {
                "title": message.title,
                "body": message.body,
                "url": message.url,
                "tag": message.tag,
                "badge": message.badge,
            }
        )
        stale: List[str] = []

        for subscription in subscriptions:
            try:
                self._deliver(subscription, payload)
                result.sent += 1
            except WebPushException as ex:
                result.failed += 1
                status_code = ex.response.status_code if ex.response is not None else None
                if status_code in GONE_STATUS_CODES:
                    stale.append(subscription.endpoint)
                else:
                    logger.error(
                        "Push to profile %s failed with status %s: %s",
                        profile_id, status_code, ex,
                    )
            except Exception:
                result.failed += 1
                logger.error("Push to profile %s failed", profile_id, exc_info=True)

        if stale:
            result.cleaned = self.subscription_repo.delete_endpoints(profile_id, stale)
            logger.info("Removed %d stale push endpoints of profile %s", result.cleaned, profile_id)

        return result

    def send_push_to_user(self, message: PushMessage) -> DispatchResult:
        """Dispatch addressed by the profile's public uuid."""
        profile = self.profile_repo.get_by_uuid(message.user_id)
        if not profile:
            raise ResourceNotFoundException("Profile", message.user_id)
        return self.send_push(profile.id, message)

    def _deliver(self, subscription: PushSubscription, payload: str) -> None:
        self.sender(
            subscription_info=subscription.as_subscription_info(),
            data=payload,
            vapid_private_key=settings.VAPID_PRIVATE_KEY,
            vapid_claims={"sub": settings.VAPID_SUBJECT},
            ttl=PUSH_TTL_SECONDS,
            headers={"Urgency": "high"},
        )

    # In-app notifications

    def notify(self, profile_id: int, message: PushContent, kind: str = "default") -> DispatchResult:
        """
        Record an in-app notification, then push it to the profile's devices.

        Push is skipped while no VAPID key pair is configured; the in-app
        row is still written.
        """
        self.notification_repo.create(
            Notification(
                profile_id=profile_id,
                kind=kind,
                title=message.title,
                body=message.body,
                url=message.url,
            )
        )
        if not (settings.VAPID_PUBLIC_KEY and settings.VAPID_PRIVATE_KEY):
            logger.warning("VAPID keys not configured; skipping push to profile %s", profile_id)
            return DispatchResult()
        return self.send_push(profile_id, message)

    def list_notifications(self, profile: Profile, limit: int = 50) -> List[NotificationResponse]:
        return [
            NotificationResponse.model_validate(n)
            for n in self.notification_repo.list_for_profile(profile.id, limit)
        ]

    def mark_read(self, profile: Profile, notification_id: int) -> NotificationResponse:
        notification = self.notification_repo.get_for_profile(notification_id, profile.id)
        if not notification:
            raise ResourceNotFoundException("Notification", notification_id)

        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return NotificationResponse.model_validate(notification)

    def mark_all_read(self, profile: Profile) -> int:
        return self.notification_repo.mark_all_read(profile.id)

    def unread_count(self, profile: Profile) -> int:
        return self.notification_repo.count_unread(profile.id)

    # Push registration

    def register_subscription(
        self, profile: Profile, data: PushSubscriptionCreate
    ) -> PushSubscriptionResponse:
        """
        Register a browser endpoint for the caller. An endpoint that was
        registered before (possibly by another profile on a shared device)
        moves to the caller with its new keys.
        """
        subscription = self.subscription_repo.get_by_endpoint(data.endpoint)
        if subscription:
            subscription.profile_id = profile.id
            subscription.p256dh = data.keys.p256dh
            subscription.auth = data.keys.auth
            self.db.commit()
            self.db.refresh(subscription)
        else:
            subscription = self.subscription_repo.create(
                PushSubscription(
                    profile_id=profile.id,
                    endpoint=data.endpoint,
                    p256dh=data.keys.p256dh,
                    auth=data.keys.auth,
                )
            )
        return PushSubscriptionResponse.model_validate(subscription)

    def remove_subscription(self, profile: Profile, endpoint: str) -> bool:
        return self.subscription_repo.delete_endpoints(profile.id, [endpoint]) > 0
