import pytest

from app.config import settings
from app.models.question import DailyQuestion


API = "/api/v1"


@pytest.mark.integration
class TestJobEndpoints:
    """Integration tests for the scheduler-facing job endpoints"""

    def test_rejects_missing_credentials(self, client):
        response = client.post(f"{API}/jobs/daily-questions")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid service credentials"

    def test_rejects_wrong_key(self, client):
        response = client.post(
            f"{API}/jobs/daily-questions", headers={"Authorization": "Bearer not-the-key"}
        )

        assert response.status_code == 401

    def test_missing_service_key_configuration(self, client, service_headers, monkeypatch):
        monkeypatch.setattr(settings, "SERVICE_ROLE_KEY", "")

        response = client.post(f"{API}/jobs/daily-questions", headers=service_headers)

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["message"] == "Missing env vars: SERVICE_ROLE_KEY"
        assert body["error"]["category"] == "Configuration Error"

    def test_daily_questions_job(self, client, db_session, couple_room, questions, service_headers):
        first = client.post(f"{API}/jobs/daily-questions", headers=service_headers)
        assert first.status_code == 200
        assert first.json()["success"] is True
        assert first.json()["added"] == 1

        second = client.post(f"{API}/jobs/daily-questions", headers=service_headers).json()
        assert second["added"] == 0
        assert second["skipped"] == 1
        assert second["date_key"] == first.json()["date_key"]
        assert db_session.query(DailyQuestion).count() == 1

    def test_due_reminders_job(self, client, service_headers):
        response = client.post(f"{API}/jobs/due-reminders", headers=service_headers)

        assert response.status_code == 200
        assert response.json() == {
            "success": True, "reminders_sent": 0, "events_processed": 0, "tasks_processed": 0
        }

    def test_due_reminders_need_vapid(self, client, service_headers, monkeypatch):
        monkeypatch.setattr(settings, "VAPID_PRIVATE_KEY", "")

        response = client.post(f"{API}/jobs/due-reminders", headers=service_headers)

        assert response.status_code == 500
        assert "VAPID_PRIVATE_KEY" in response.json()["error"]["message"]

    def test_anniversary_job(self, client, service_headers):
        response = client.post(f"{API}/jobs/anniversary-reminders", headers=service_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "sent": 0}
