import pytest
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session

from app.models.question import Answer, DailyQuestion
from app.services.activity_service import (
    ActivityService,
    compute_stats,
    day_status,
    next_day_milestone,
    time_together,
)

# 10:00 UTC on 2024-06-08 is business day 2024-06-08
NOW = datetime(2024, 6, 8, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def record_day(db_session, couple_room, questions):
    def _record_day(date_key, *profiles):
        daily = DailyQuestion(room_id=couple_room.id, date_key=date_key, question_id=questions[0])
        db_session.add(daily)
        db_session.flush()
        for profile in profiles:
            db_session.add(
                Answer(daily_question_id=daily.id, profile_id=profile.id, answer_text="An answer here")
            )
        db_session.commit()
        return daily
    return _record_day


@pytest.mark.unit
class TestStreaks:

    def test_day_status(self):
        assert day_status({1, 2}) == "both"
        assert day_status({1}) == "one"
        assert day_status(set()) == "missed"

    def test_missed_most_recent_day_breaks_current_streak(self):
        stats = compute_stats(["both", "both", "one", "both", "missed"])

        assert stats.current_streak == 0
        assert stats.best_streak == 2
        assert stats.total_answered == 3

    def test_current_streak_counts_back_from_most_recent_day(self):
        stats = compute_stats(["one", "both", "both", "both"])

        assert stats.current_streak == 3
        assert stats.best_streak == 3

    def test_empty_history(self):
        stats = compute_stats([])

        assert (stats.current_streak, stats.best_streak, stats.total_answered) == (0, 0, 0)


@pytest.mark.unit
class TestTimeTogether:

    def test_years_months_days(self):
        together = time_together(date(2020, 6, 15), date(2024, 6, 8))

        assert (together.years, together.months, together.days) == (3, 11, 24)
        assert together.total_days == 1454

    def test_exact_anniversary(self):
        together = time_together(date(2021, 3, 1), date(2024, 3, 1))

        assert (together.years, together.months, together.days) == (3, 0, 0)

    def test_month_end_start(self):
        together = time_together(date(2024, 1, 31), date(2024, 3, 1))

        assert (together.years, together.months, together.days) == (0, 1, 1)

    def test_next_milestone(self):
        milestone = next_day_milestone(date(2024, 1, 1), date(2024, 4, 1))

        assert milestone.days == 100
        assert milestone.days_remaining == 9
        assert milestone.date_key == "2024-04-10"

    def test_no_milestone_after_the_last(self):
        assert next_day_milestone(date(2018, 1, 1), date(2024, 1, 1)) is None


@pytest.mark.unit
class TestActivityService:
    """Progress is recomputed from daily questions on every read."""

    def test_streaks_from_history(self, db_session: Session, couple_room, ada, ben, record_day):
        record_day("2024-06-04", ada, ben)
        record_day("2024-06-05", ada, ben)
        record_day("2024-06-06", ben)
        record_day("2024-06-07", ada, ben)
        record_day("2024-06-08")

        progress = ActivityService(db_session).get_progress(couple_room, ada, now=NOW)

        assert progress.stats.current_streak == 0
        assert progress.stats.best_streak == 2
        assert progress.stats.total_answered == 3

    def test_today_counts_once_both_answered(self, db_session: Session, couple_room, ada, ben, record_day):
        record_day("2024-06-07", ada, ben)
        record_day("2024-06-08", ada, ben)

        progress = ActivityService(db_session).get_progress(couple_room, ada, now=NOW)

        assert progress.stats.current_streak == 2

    def test_day_without_question_breaks_the_streak(self, db_session: Session, couple_room, ada, ben, record_day):
        record_day("2024-06-05", ada, ben)
        record_day("2024-06-07", ada, ben)
        record_day("2024-06-08", ada, ben)

        progress = ActivityService(db_session).get_progress(couple_room, ada, now=NOW)

        assert progress.stats.current_streak == 2
        assert progress.stats.best_streak == 2

    def test_heatmap_covers_ninety_days(self, db_session: Session, couple_room, ada, ben, record_day):
        record_day("2024-06-07", ben)
        record_day("2024-06-08", ada, ben)

        progress = ActivityService(db_session).get_progress(couple_room, ada, now=NOW)

        assert len(progress.heatmap) == 90
        assert progress.heatmap[0].date_key == "2024-03-11"
        assert progress.heatmap[-1].date_key == "2024-06-08"
        assert (progress.heatmap[-1].status, progress.heatmap[-1].answered_by_me) == ("both", True)
        assert (progress.heatmap[-2].status, progress.heatmap[-2].answered_by_me) == ("one", False)
        assert progress.heatmap[-3].status == "missed"

    def test_time_together_needs_anniversary(self, db_session: Session, make_room, ada, ben):
        room = make_room(ada, ben, anniversary_date=date(2020, 6, 15))

        progress = ActivityService(db_session).get_progress(room, ada, now=NOW)

        assert progress.time_together.years == 3
        assert progress.next_milestone is None

    def test_no_anniversary_no_time_together(self, db_session: Session, couple_room, ada):
        progress = ActivityService(db_session).get_progress(couple_room, ada, now=NOW)

        assert progress.time_together is None
        assert progress.stats.current_streak == 0
