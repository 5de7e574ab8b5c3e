import json
import pytest
from datetime import datetime, timezone
from sqlalchemy.orm import Session

from app.core.exception import BadRequestException, ResourceNotFoundException
from app.models.moments import Memory, MoodCheckin, Nudge
from app.models.notification import Notification
from app.models.planner import DateCompletion, DateIdea
from app.models.question import Answer, DailyQuestion
from app.schemas.moments import DailyLogCreate, MemoryCreate, MilestoneCreate, NudgeCreate
from app.services.moments_service import MomentsService


@pytest.fixture
def service(db_session: Session, push_sender):
    return MomentsService(db_session)


@pytest.mark.unit
class TestMemories:

    def test_favorite_is_per_member(self, service, couple_room, ada, ben):
        memory = service.create_memory(couple_room, ada, MemoryCreate(title="Beach day", date_key="2024-06-01"))

        assert service.toggle_favorite(couple_room, ada, memory.id).is_favorite is True
        assert service.get_memory(couple_room, ada, memory.id).is_favorite is True
        assert service.get_memory(couple_room, ben, memory.id).is_favorite is False
        assert [m.is_favorite for m in service.list_memories(couple_room, ada)] == [True]

        assert service.toggle_favorite(couple_room, ada, memory.id).is_favorite is False
        assert service.get_memory(couple_room, ada, memory.id).is_favorite is False

    def test_memories_newest_date_first(self, service, couple_room, ada):
        service.create_memory(couple_room, ada, MemoryCreate(title="Older", date_key="2024-01-01"))
        service.create_memory(couple_room, ada, MemoryCreate(title="Newer", date_key="2024-05-01"))

        assert [m.title for m in service.list_memories(couple_room, ada)] == ["Newer", "Older"]

    def test_memory_of_other_room(self, service, couple_room, ada, make_profile, make_room):
        cy = make_profile("Cy")
        other_room = make_room(cy)
        memory = service.create_memory(couple_room, ada, MemoryCreate(title="Beach day"))

        with pytest.raises(ResourceNotFoundException):
            service.get_memory(other_room, cy, memory.id)

    def test_milestone_defaults_to_today(self, service, couple_room, ada):
        milestone = service.create_milestone(couple_room, ada, MilestoneCreate(title="Moved in"))

        assert len(milestone.date_key) == 10
        assert service.delete_milestone(couple_room, milestone.id) is True
        assert service.list_milestones(couple_room) == []


@pytest.mark.unit
class TestNudges:

    def test_nudge_notifies_only_partner(
        self, service, db_session, couple_room, ada, ben, subscribe, push_sender
    ):
        subscribe(ada, "https://push.example/ada")
        subscribe(ben, "https://push.example/ben")

        nudge = service.send_nudge(couple_room, ada, NudgeCreate(emoji="💌", message="Miss you"))

        assert push_sender.endpoints == ["https://push.example/ben"]
        payload = json.loads(push_sender.calls[0]["data"])
        assert payload["title"] == "💌 Ada is thinking of you"
        assert payload["body"] == "Miss you"
        assert payload["url"] == "/app/nudge"
        assert payload["tag"] == f"nudge-{nudge.id}"

        notifications = db_session.query(Notification).all()
        assert [(n.profile_id, n.kind) for n in notifications] == [(ben.id, "nudge")]

    def test_nudge_without_partner(self, service, db_session, make_profile, make_room, push_sender):
        solo = make_profile("Solo")
        room = make_room(solo)

        service.send_nudge(room, solo, NudgeCreate(emoji="👋"))

        assert push_sender.calls == []
        assert db_session.query(Nudge).count() == 1

    def test_mark_seen_only_partner_nudges(self, service, db_session, couple_room, ada, ben, push_sender):
        service.send_nudge(couple_room, ada, NudgeCreate(emoji="💌"))
        service.send_nudge(couple_room, ben, NudgeCreate(emoji="🤗"))

        assert service.mark_nudges_seen(couple_room, ben) == 1
        assert service.mark_nudges_seen(couple_room, ben) == 0

        seen = {n.sender_id: n.seen_at for n in db_session.query(Nudge).all()}
        assert seen[ada.id] is not None
        assert seen[ben.id] is None


@pytest.mark.unit
class TestJournal:

    def test_entry_needs_content(self, service, couple_room, ada):
        with pytest.raises(BadRequestException):
            service.create_log(couple_room, ada, DailyLogCreate())

    def test_list_logs_for_one_day(self, service, couple_room, ada, ben):
        service.create_log(couple_room, ada, DailyLogCreate(text="Long walk", date_key="2024-06-07"))
        service.create_log(couple_room, ben, DailyLogCreate(text="Pizza night", date_key="2024-06-08"))

        logs = service.list_logs(couple_room, "2024-06-08")

        assert [log.text for log in logs] == ["Pizza night"]
        assert len(service.list_logs(couple_room)) == 2


@pytest.mark.unit
class TestRecap:

    def test_month_counts(self, service, db_session, couple_room, ada, ben, questions):
        room_id = couple_room.id
        june = DailyQuestion(room_id=room_id, date_key="2024-06-03", question_id=questions[0])
        half = DailyQuestion(room_id=room_id, date_key="2024-06-04", question_id=questions[1])
        may = DailyQuestion(room_id=room_id, date_key="2024-05-31", question_id=questions[2])
        db_session.add_all([june, half, may])
        db_session.flush()
        idea = DateIdea(title="Picnic")
        db_session.add(idea)
        db_session.flush()
        db_session.add_all([
            Answer(daily_question_id=june.id, profile_id=ada.id, answer_text="The way you laugh"),
            Answer(daily_question_id=june.id, profile_id=ben.id, answer_text="Our long walks"),
            Answer(daily_question_id=half.id, profile_id=ada.id, answer_text="Sunday pancakes"),
            Answer(daily_question_id=may.id, profile_id=ada.id, answer_text="Not in June"),
            Answer(daily_question_id=may.id, profile_id=ben.id, answer_text="Also not in June"),
            Nudge(room_id=room_id, sender_id=ada.id, emoji="💌", date_key="2024-06-10"),
            Nudge(room_id=room_id, sender_id=ben.id, emoji="🤗", date_key="2024-06-30"),
            Nudge(room_id=room_id, sender_id=ben.id, emoji="🤗", date_key="2024-07-01"),
            MoodCheckin(room_id=room_id, profile_id=ada.id, mood="happy", date_key="2024-06-12"),
            Memory(room_id=room_id, created_by_id=ada.id, title="Beach", date_key="2024-06-01"),
            DateCompletion(
                room_id=room_id, date_idea_id=idea.id, created_by_id=ada.id, date_key="2024-06-15",
                completed_at=datetime(2024, 6, 15, 20, tzinfo=timezone.utc),
            ),
            DateCompletion(room_id=room_id, date_idea_id=idea.id, created_by_id=ada.id, date_key="2024-06-20"),
        ])
        db_session.commit()

        recap = service.get_recap(couple_room, 2024, 6)

        assert (recap.start_key, recap.end_key) == ("2024-06-01", "2024-06-30")
        assert recap.questions_completed == 1
        assert recap.nudges_sent == 2
        assert recap.mood_checkins == 1
        assert recap.memories == 1
        assert recap.milestones == 0
        assert recap.dates_completed == 1

        year = service.get_recap(couple_room, 2024)
        assert (year.start_key, year.end_key) == ("2024-01-01", "2024-12-31")
        assert year.questions_completed == 2
        assert year.nudges_sent == 3

    def test_invalid_month(self, service, couple_room):
        with pytest.raises(BadRequestException):
            service.get_recap(couple_room, 2024, 13)
