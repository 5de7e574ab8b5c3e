"""
Streaks and the activity heatmap.

Nothing here is stored: every read recomputes from the room's daily
questions and their answers, so the numbers can never drift from the rows
they describe.
"""
import calendar
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from app.config import settings
from app.models.profile import Profile
from app.models.room import MAX_ROOM_MEMBERS, Room
from app.repositories.question_repository import DailyQuestionRepository
from app.schemas.activity import (
    ActivityStats,
    DayActivity,
    NextMilestone,
    ProgressResponse,
    TimeTogether,
)
from app.utils.date_keys import (
    business_date,
    date_key_for,
    date_keys_between,
    shift_date_key,
)

BOTH = "both"
ONE = "one"
MISSED = "missed"

DAY_MILESTONES = [100, 200, 365, 500, 1000]


def day_status(answered_by: Set[int]) -> str:
    if len(answered_by) >= MAX_ROOM_MEMBERS:
        return BOTH
    if answered_by:
        return ONE
    return MISSED


def day_statuses(answers_by_day: Dict[str, Set[int]], date_keys: Iterable[str]) -> List[str]:
    """Status of each date key in order; a day with no question is missed."""
    return [day_status(answers_by_day.get(key, set())) for key in date_keys]


def current_streak(statuses: List[str]) -> int:
    """Consecutive 'both' days ending at the last (most recent) entry."""
    streak = 0
    for status in reversed(statuses):
        if status != BOTH:
            break
        streak += 1
    return streak


def best_streak(statuses: List[str]) -> int:
    best = run = 0
    for status in statuses:
        run = run + 1 if status == BOTH else 0
        best = max(best, run)
    return best


def compute_stats(statuses: List[str]) -> ActivityStats:
    return ActivityStats(
        current_streak=current_streak(statuses),
        best_streak=best_streak(statuses),
        total_answered=sum(1 for status in statuses if status == BOTH),
    )


def time_together(since: date, today: date) -> TimeTogether:
    """Whole years, months and days from `since` to `today`."""
    total_months = (today.year - since.year) * 12 + today.month - since.month
    if today.day < since.day:
        total_months -= 1

    year, month = divmod(since.month - 1 + total_months, 12)
    year += since.year
    # Clamp to the month length, so Jan 31 plus one month is Feb 28/29
    anchor = date(year, month + 1, min(since.day, calendar.monthrange(year, month + 1)[1]))

    years, months = divmod(total_months, 12)
    return TimeTogether(
        total_days=(today - since).days, years=years, months=months, days=(today - anchor).days
    )


def next_day_milestone(since: date, today: date) -> Optional[NextMilestone]:
    elapsed = (today - since).days
    for days in DAY_MILESTONES:
        if days > elapsed:
            return NextMilestone(
                days=days,
                date_key=shift_date_key(date_key_for(since), days),
                days_remaining=days - elapsed,
            )
    return None


class ActivityService:

    def __init__(self, db: Session):
        self.db = db
        self.daily_repo = DailyQuestionRepository(db)

    def get_progress(
        self, room: Room, profile: Profile, now: Optional[datetime] = None
    ) -> ProgressResponse:
        today = business_date(now)
        today_key = date_key_for(today)

        dailies = self.daily_repo.get_all_for_room(room.id)
        answers_by_day: Dict[str, Set[int]] = {
            daily.date_key: {answer.profile_id for answer in daily.answers}
            for daily in dailies
            if daily.date_key <= today_key
        }

        if answers_by_day:
            history_keys = date_keys_between(min(answers_by_day), today_key)
        else:
            history_keys = []
        stats = compute_stats(day_statuses(answers_by_day, history_keys))

        window_start = shift_date_key(today_key, -(settings.ACTIVITY_WINDOW_DAYS - 1))
        heatmap = [
            DayActivity(
                date_key=key,
                status=day_status(answers_by_day.get(key, set())),
                answered_by_me=profile.id in answers_by_day.get(key, set()),
            )
            for key in date_keys_between(window_start, today_key)
        ]

        response = ProgressResponse(stats=stats, heatmap=heatmap)
        if room.anniversary_date and room.anniversary_date <= today:
            response.time_together = time_together(room.anniversary_date, today)
            response.next_milestone = next_day_milestone(room.anniversary_date, today)
        return response
