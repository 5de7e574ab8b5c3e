import pytest

from app.models.notification import PushSubscription


API = "/api/v1"

SUBSCRIPTION = {
    "endpoint": "https://push.example/ada-phone",
    "keys": {"p256dh": "test-p256dh", "auth": "test-auth"},
}


@pytest.mark.integration
class TestNotificationEndpoints:
    """Integration tests for push subscriptions and in-app notifications"""

    def test_register_and_remove_subscription(self, client, db_session, ada_headers):
        created = client.post(f"{API}/notifications/subscriptions", json=SUBSCRIPTION, headers=ada_headers)
        assert created.status_code == 201
        assert created.json()["data"]["endpoint"] == SUBSCRIPTION["endpoint"]

        removed = client.delete(
            f"{API}/notifications/subscriptions",
            params={"endpoint": SUBSCRIPTION["endpoint"]},
            headers=ada_headers,
        )
        assert removed.json()["data"] == {"removed": True}
        assert db_session.query(PushSubscription).count() == 0

    def test_send_requires_service_role(self, client, ada):
        response = client.post(
            f"{API}/notifications/send", json={"user_id": ada.uuid, "title": "Hi", "body": "Hello"}
        )

        assert response.status_code == 401

    def test_send_push(self, client, ada, subscribe, push_sender, service_headers):
        subscribe(ada, "https://push.example/ada-phone")
        subscribe(ada, "https://push.example/ada-laptop")
        push_sender.failures["https://push.example/ada-laptop"] = 410

        response = client.post(
            f"{API}/notifications/send",
            json={"user_id": ada.uuid, "title": "Hi", "body": "Hello"},
            headers=service_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"sent": 1, "failed": 1, "cleaned": 1}

    def test_send_to_unknown_user(self, client, service_headers):
        response = client.post(
            f"{API}/notifications/send",
            json={"user_id": "nobody", "title": "Hi", "body": "Hello"},
            headers=service_headers,
        )

        assert response.status_code == 404

    def test_nudge_lands_in_partner_notifications(self, client, couple_room, ada_headers, ben_headers):
        sent = client.post(f"{API}/nudges", json={"emoji": "💌"}, headers=ada_headers)
        assert sent.status_code == 201

        assert client.get(f"{API}/notifications/unread-count", headers=ben_headers).json()["data"] == {"unread": 1}
        assert client.get(f"{API}/notifications/unread-count", headers=ada_headers).json()["data"] == {"unread": 0}

        notifications = client.get(f"{API}/notifications", headers=ben_headers).json()["data"]
        assert notifications[0]["kind"] == "nudge"
        assert notifications[0]["url"] == "/app/nudge"

        read = client.post(f"{API}/notifications/{notifications[0]['id']}/read", headers=ben_headers)
        assert read.json()["data"]["read"] is True
        assert client.get(f"{API}/notifications/unread-count", headers=ben_headers).json()["data"] == {"unread": 0}
