import pytest


API = "/api/v1"


@pytest.mark.integration
class TestMomentsEndpoints:
    """Integration tests for memories, journal, moods and recaps"""

    def test_memory_favorite(self, client, couple_room, ada_headers, ben_headers):
        memory = client.post(
            f"{API}/memories", json={"title": "Beach day", "date_key": "2024-06-01"}, headers=ada_headers
        ).json()["data"]

        favorite = client.post(f"{API}/memories/{memory['id']}/favorite", headers=ben_headers)

        assert favorite.json()["data"]["is_favorite"] is True
        ada_view = client.get(f"{API}/memories/{memory['id']}", headers=ada_headers).json()["data"]
        assert ada_view["is_favorite"] is False

    def test_memory_date_key_format(self, client, couple_room, ada_headers):
        response = client.post(
            f"{API}/memories", json={"title": "Beach day", "date_key": "01.06.2024"}, headers=ada_headers
        )

        assert response.status_code == 422

    def test_journal(self, client, couple_room, ada_headers, ben_headers):
        empty = client.post(f"{API}/journal", json={"date_key": "2024-06-08"}, headers=ada_headers)
        assert empty.status_code == 400

        client.post(f"{API}/journal", json={"text": "Pizza night", "date_key": "2024-06-08"}, headers=ada_headers)
        logs = client.get(f"{API}/journal", params={"date_key": "2024-06-08"}, headers=ben_headers).json()["data"]

        assert [log["text"] for log in logs] == ["Pizza night"]

    def test_mood_and_recap(self, client, couple_room, ada_headers):
        mood = client.post(f"{API}/moods", json={"mood": "happy"}, headers=ada_headers)
        assert mood.status_code == 201
        year = int(mood.json()["data"]["date_key"][:4])

        recap = client.get(f"{API}/recap/{year}", headers=ada_headers).json()["data"]

        assert recap["mood_checkins"] == 1
        assert recap["start_key"] == f"{year}-01-01"

    def test_recap_month_out_of_range(self, client, couple_room, ada_headers):
        response = client.get(f"{API}/recap/2024/13", headers=ada_headers)

        assert response.status_code == 400
