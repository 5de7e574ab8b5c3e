import random
import pytest
from datetime import datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exception import DuplicateResourceException, ResourceNotFoundException
from app.models.question import Answer, DailyQuestion
from app.repositories.question_repository import DailyQuestionRepository
from app.schemas.question import AnswerCreate, ReactionUpdate
from app.services.daily_question_service import DailyQuestionService
from app.utils.date_keys import business_date_key, shift_date_key

NOW = datetime(2024, 6, 8, 10, 0, tzinfo=timezone.utc)


def assign(db_session, room_id, date_key, question_id):
    daily = DailyQuestion(room_id=room_id, date_key=date_key, question_id=question_id)
    db_session.add(daily)
    db_session.commit()
    db_session.refresh(daily)
    return daily


def answer(db_session, daily, profile, text="A thoughtful answer"):
    db_session.add(Answer(daily_question_id=daily.id, profile_id=profile.id, answer_text=text))
    db_session.commit()
    db_session.refresh(daily)


@pytest.mark.unit
class TestAssignDailyQuestions:
    """Unit tests for the daily assignment job."""

    def test_assigns_one_question_per_room(self, db_session: Session, questions, make_profile, make_room):
        rooms = [make_room(make_profile()), make_room(make_profile()), make_room(make_profile())]
        service = DailyQuestionService(db_session)

        result = service.assign_daily_questions(now=NOW)

        assert result.success is True
        assert result.date_key == "2024-06-08"
        assert (result.added, result.skipped, result.failed) == (3, 0, 0)
        for room in rooms:
            daily = db_session.query(DailyQuestion).filter_by(room_id=room.id).one()
            assert daily.date_key == "2024-06-08"
            assert daily.question_id in questions

    def test_second_run_skips_every_room(self, db_session: Session, questions, couple_room):
        service = DailyQuestionService(db_session)
        service.assign_daily_questions(now=NOW)

        result = service.assign_daily_questions(now=NOW)

        assert (result.added, result.skipped, result.failed) == (0, 1, 0)
        assert db_session.query(DailyQuestion).filter_by(room_id=couple_room.id).count() == 1

    def test_avoids_recently_assigned_questions(self, db_session: Session, questions, couple_room):
        spare = questions[-1]
        for offset, question_id in enumerate(questions[:-1], start=1):
            assign(db_session, couple_room.id, shift_date_key("2024-06-08", -offset), question_id)

        service = DailyQuestionService(db_session, rng=random.Random(7))
        service.assign_daily_questions(now=NOW)

        today = db_session.query(DailyQuestion).filter_by(room_id=couple_room.id, date_key="2024-06-08").one()
        assert today.question_id == spare

    def test_falls_back_to_whole_pool_when_everything_is_recent(self, db_session: Session, questions, couple_room):
        for offset, question_id in enumerate(questions, start=1):
            assign(db_session, couple_room.id, shift_date_key("2024-06-08", -offset), question_id)

        result = DailyQuestionService(db_session).assign_daily_questions(now=NOW)

        assert result.added == 1

    def test_empty_pool_inserts_nothing(self, db_session: Session, couple_room):
        result = DailyQuestionService(db_session).assign_daily_questions(now=NOW)

        assert (result.added, result.skipped, result.failed) == (0, 0, 0)
        assert db_session.query(DailyQuestion).count() == 0

    def test_failure_in_one_room_does_not_stop_the_others(
        self, db_session: Session, questions, make_profile, make_room, monkeypatch
    ):
        broken = make_room(make_profile())
        healthy = make_room(make_profile())
        service = DailyQuestionService(db_session)
        original = service.daily_repo.insert_if_absent

        def flaky_insert(room_id, date_key, question_id):
            if room_id == broken.id:
                raise SQLAlchemyError("connection reset")
            return original(room_id, date_key, question_id)

        monkeypatch.setattr(service.daily_repo, "insert_if_absent", flaky_insert)

        result = service.assign_daily_questions(now=NOW)

        assert (result.added, result.skipped, result.failed) == (1, 0, 1)
        assert db_session.query(DailyQuestion).filter_by(room_id=healthy.id).count() == 1
        assert db_session.query(DailyQuestion).filter_by(room_id=broken.id).count() == 0

    def test_insert_if_absent_is_idempotent(self, db_session: Session, questions, couple_room):
        service = DailyQuestionService(db_session)

        assert service.daily_repo.insert_if_absent(couple_room.id, "2024-06-08", questions[0]) is True
        assert service.daily_repo.insert_if_absent(couple_room.id, "2024-06-08", questions[1]) is False

        daily = service.daily_repo.get_for_date(couple_room.id, "2024-06-08")
        assert daily.question_id == questions[0]

    def test_dialect_without_on_conflict_uses_guarded_insert(
        self, db_session: Session, monkeypatch, questions, couple_room
    ):
        monkeypatch.setattr(DailyQuestionRepository, "_DIALECT_INSERTS", {})
        repo = DailyQuestionRepository(db_session)

        assert repo.insert_if_absent(couple_room.id, "2024-06-08", questions[0]) is True
        assert repo.insert_if_absent(couple_room.id, "2024-06-08", questions[1]) is False

        daily = repo.get_for_date(couple_room.id, "2024-06-08")
        assert daily.question_id == questions[0]
        assert db_session.query(DailyQuestion).count() == 1


@pytest.mark.unit
class TestEnsureToday:
    """Unit tests for the on-demand fallback used by clients."""

    def test_assigns_when_job_has_not_run(self, db_session: Session, questions, couple_room, ada):
        service = DailyQuestionService(db_session)

        today = service.ensure_today(couple_room, ada)

        assert today.date_key == business_date_key()
        assert today.question.id in questions
        assert today.my_answer is None

    def test_returns_same_question_on_repeat_calls(self, db_session: Session, questions, couple_room, ada, ben):
        service = DailyQuestionService(db_session)

        first = service.ensure_today(couple_room, ada)
        second = service.ensure_today(couple_room, ben)

        assert first.id == second.id
        assert db_session.query(DailyQuestion).count() == 1

    def test_falls_back_to_plain_insert_when_atomic_ensure_fails(
        self, db_session: Session, questions, couple_room, ada, monkeypatch
    ):
        service = DailyQuestionService(db_session)

        def broken_insert(*args, **kwargs):
            raise SQLAlchemyError("function does not exist")

        monkeypatch.setattr(service.daily_repo, "insert_if_absent", broken_insert)

        today = service.ensure_today(couple_room, ada)

        assert today.date_key == business_date_key()
        assert db_session.query(DailyQuestion).count() == 1

    def test_no_questions_at_all_is_not_found(self, db_session: Session, couple_room, ada):
        with pytest.raises(ResourceNotFoundException):
            DailyQuestionService(db_session).ensure_today(couple_room, ada)

    def test_partner_answer_hidden_until_caller_answers(self, db_session: Session, questions, couple_room, ada, ben):
        service = DailyQuestionService(db_session)
        today = service.ensure_today(couple_room, ada)
        daily = db_session.get(DailyQuestion, today.id)
        answer(db_session, daily, ben, "Ben's answer to today")

        before = service.ensure_today(couple_room, ada)
        assert before.partner_answered is True
        assert before.partner_answer is None

        answer(db_session, daily, ada, "Ada's answer to today")
        after = service.ensure_today(couple_room, ada)
        assert after.my_answer.answer_text == "Ada's answer to today"
        assert after.partner_answer.answer_text == "Ben's answer to today"


@pytest.mark.unit
class TestEngagement:

    def test_second_answer_is_a_conflict(self, db_session: Session, questions, couple_room, ada):
        service = DailyQuestionService(db_session)
        today = service.ensure_today(couple_room, ada)

        service.submit_answer(couple_room, ada, today.id, AnswerCreate(answer_text="My first answer"))

        with pytest.raises(DuplicateResourceException):
            service.submit_answer(couple_room, ada, today.id, AnswerCreate(answer_text="Changed my mind"))

    def test_cannot_answer_another_rooms_question(
        self, db_session: Session, questions, couple_room, ada, make_profile, make_room
    ):
        stranger = make_profile("Cy")
        other_room = make_room(stranger)
        service = DailyQuestionService(db_session)
        theirs = service.ensure_today(other_room, stranger)

        with pytest.raises(ResourceNotFoundException):
            service.submit_answer(couple_room, ada, theirs.id, AnswerCreate(answer_text="Not my question"))

    def test_reaction_toggles_off_with_same_emoji(self, db_session: Session, questions, couple_room, ada):
        service = DailyQuestionService(db_session)
        today = service.ensure_today(couple_room, ada)

        reaction = service.set_reaction(couple_room, ada, today.id, ReactionUpdate(emoji="❤️"))
        assert reaction.emoji == "❤️"

        changed = service.set_reaction(couple_room, ada, today.id, ReactionUpdate(emoji="😂"))
        assert changed.id == reaction.id
        assert changed.emoji == "😂"

        assert service.set_reaction(couple_room, ada, today.id, ReactionUpdate(emoji="😂")) is None
        assert service.reaction_repo.list_for_question(today.id) == []

    def test_reaction_with_comment_survives_emoji_toggle(self, db_session: Session, questions, couple_room, ada):
        service = DailyQuestionService(db_session)
        today = service.ensure_today(couple_room, ada)
        service.set_reaction(couple_room, ada, today.id, ReactionUpdate(emoji="❤️", comment="So true"))

        reaction = service.set_reaction(couple_room, ada, today.id, ReactionUpdate(emoji="❤️"))

        assert reaction.emoji is None
        assert reaction.comment == "So true"

    def test_history_statuses(self, db_session: Session, questions, couple_room, ada, ben):
        completed = assign(db_session, couple_room.id, "2024-06-05", questions[0])
        waiting = assign(db_session, couple_room.id, "2024-06-06", questions[1])
        assign(db_session, couple_room.id, "2024-06-07", questions[2])
        answer(db_session, completed, ada)
        answer(db_session, completed, ben)
        answer(db_session, waiting, ben)

        history = DailyQuestionService(db_session).get_history(couple_room, ada)

        assert [(h.date_key, h.status, h.answered_by_me) for h in history] == [
            ("2024-06-07", "missed", False),
            ("2024-06-06", "waiting", False),
            ("2024-06-05", "completed", True),
        ]
