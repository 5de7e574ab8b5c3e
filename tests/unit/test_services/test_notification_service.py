import pytest
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exception import MissingConfigurationException, ResourceNotFoundException
from app.models.notification import Notification, PushSubscription
from app.schemas.notification import PushContent, PushKeys, PushMessage, PushSubscriptionCreate
from app.services.notification_service import NotificationService

MESSAGE = PushContent(title="Hello", body="Thinking of you", url="/app", tag="test", badge=1)


def endpoints_of(db_session, profile):
    return sorted(
        s.endpoint for s in db_session.query(PushSubscription).filter_by(profile_id=profile.id)
    )


@pytest.mark.unit
class TestSendPush:
    """Unit tests for Web Push fan-out."""

    def test_no_subscriptions_sends_nothing(self, db_session: Session, push_sender, ada):
        result = NotificationService(db_session).send_push(ada.id, MESSAGE)

        assert (result.sent, result.failed, result.cleaned) == (0, 0, 0)
        assert push_sender.calls == []

    def test_sends_to_every_endpoint(self, db_session: Session, push_sender, subscribe, ada):
        subscribe(ada, "https://push.example/phone")
        subscribe(ada, "https://push.example/laptop")

        result = NotificationService(db_session).send_push(ada.id, MESSAGE)

        assert (result.sent, result.failed, result.cleaned) == (2, 0, 0)
        call = push_sender.calls[0]
        assert call["vapid_private_key"] == settings.VAPID_PRIVATE_KEY
        assert call["vapid_claims"] == {"sub": settings.VAPID_SUBJECT}
        assert call["ttl"] == 86400

    def test_gone_endpoints_are_cleaned_and_others_kept(self, db_session: Session, push_sender, subscribe, ada):
        subscribe(ada, "https://push.example/ok")
        subscribe(ada, "https://push.example/gone")
        subscribe(ada, "https://push.example/expired")
        subscribe(ada, "https://push.example/flaky")
        push_sender.failures["https://push.example/gone"] = 410
        push_sender.failures["https://push.example/expired"] = 404
        push_sender.failures["https://push.example/flaky"] = 500

        result = NotificationService(db_session).send_push(ada.id, MESSAGE)

        assert (result.sent, result.failed, result.cleaned) == (1, 3, 2)
        assert endpoints_of(db_session, ada) == ["https://push.example/flaky", "https://push.example/ok"]

    def test_unexpected_errors_do_not_stop_fan_out(self, db_session: Session, push_sender, subscribe, ada):
        subscribe(ada, "https://push.example/first")
        subscribe(ada, "https://push.example/second")
        push_sender.failures["https://push.example/first"] = ConnectionError("timed out")

        result = NotificationService(db_session).send_push(ada.id, MESSAGE)

        assert (result.sent, result.failed, result.cleaned) == (1, 1, 0)
        assert len(endpoints_of(db_session, ada)) == 2

    def test_cleanup_only_touches_the_target_profile(
        self, db_session: Session, push_sender, subscribe, ada, ben
    ):
        subscribe(ada, "https://push.example/ada-gone")
        subscribe(ben, "https://push.example/ben")
        push_sender.failures["https://push.example/ada-gone"] = 410

        NotificationService(db_session).send_push(ada.id, MESSAGE)

        assert endpoints_of(db_session, ada) == []
        assert endpoints_of(db_session, ben) == ["https://push.example/ben"]

    def test_missing_vapid_configuration(self, db_session: Session, push_sender, subscribe, ada, monkeypatch):
        monkeypatch.setattr(settings, "VAPID_PUBLIC_KEY", "")
        monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "")
        subscribe(ada, "https://push.example/phone")

        with pytest.raises(MissingConfigurationException) as exc_info:
            NotificationService(db_session).send_push(ada.id, MESSAGE)

        assert exc_info.value.status_code == 500
        assert exc_info.value.names == ["VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY"]
        assert push_sender.calls == []

    def test_send_by_uuid(self, db_session: Session, push_sender, subscribe, ada):
        subscribe(ada, "https://push.example/phone")
        message = PushMessage(user_id=ada.uuid, title="Hi", body="There")

        result = NotificationService(db_session).send_push_to_user(message)

        assert result.sent == 1

    def test_send_to_unknown_uuid(self, db_session: Session, push_sender):
        message = PushMessage(user_id="no-such-user", title="Hi", body="There")

        with pytest.raises(ResourceNotFoundException):
            NotificationService(db_session).send_push_to_user(message)


@pytest.mark.unit
class TestInAppNotifications:

    def test_notify_records_and_pushes(self, db_session: Session, push_sender, subscribe, ada):
        subscribe(ada, "https://push.example/phone")

        result = NotificationService(db_session).notify(ada.id, MESSAGE, kind="nudge")

        assert result.sent == 1
        notification = db_session.query(Notification).filter_by(profile_id=ada.id).one()
        assert (notification.kind, notification.title, notification.read) == ("nudge", "Hello", False)

    def test_notify_without_vapid_keeps_in_app_row(self, db_session: Session, push_sender, ada, monkeypatch):
        monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "")

        result = NotificationService(db_session).notify(ada.id, MESSAGE)

        assert result.sent == 0
        assert db_session.query(Notification).filter_by(profile_id=ada.id).count() == 1

    def test_mark_read_and_read_all(self, db_session: Session, push_sender, ada, ben):
        service = NotificationService(db_session)
        for _ in range(3):
            service.notify(ada.id, MESSAGE)
        service.notify(ben.id, MESSAGE)
        first = service.list_notifications(ada)[0]

        assert service.mark_read(ada, first.id).read is True
        assert service.unread_count(ada) == 2
        assert service.mark_all_read(ada) == 2
        assert service.unread_count(ada) == 0
        assert service.unread_count(ben) == 1

    def test_cannot_read_someone_elses_notification(self, db_session: Session, push_sender, ada, ben):
        service = NotificationService(db_session)
        service.notify(ben.id, MESSAGE)
        theirs = service.list_notifications(ben)[0]

        with pytest.raises(ResourceNotFoundException):
            service.mark_read(ada, theirs.id)

    def test_subscription_upsert_by_endpoint(self, db_session: Session, push_sender, ada, ben):
        service = NotificationService(db_session)
        data = PushSubscriptionCreate(
            endpoint="https://push.example/shared", keys=PushKeys(p256dh="k1", auth="a1")
        )
        service.register_subscription(ada, data)

        data.keys = PushKeys(p256dh="k2", auth="a2")
        service.register_subscription(ben, data)

        subscriptions = db_session.query(PushSubscription).all()
        assert len(subscriptions) == 1
        assert (subscriptions[0].profile_id, subscriptions[0].p256dh) == (ben.id, "k2")

    def test_remove_subscription(self, db_session: Session, push_sender, subscribe, ada):
        subscribe(ada, "https://push.example/phone")
        service = NotificationService(db_session)

        assert service.remove_subscription(ada, "https://push.example/phone") is True
        assert service.remove_subscription(ada, "https://push.example/phone") is False
