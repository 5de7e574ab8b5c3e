"""
Anniversary reminders.

Once a day every room with an anniversary date is checked; members are
pushed a reminder a week before, the day before and on the day itself.
No record of a sent reminder is kept: the push tag is unique per room,
year and reminder type, so devices collapse a repeated push.
"""
import calendar
import logging
from datetime import date, datetime, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.config import require_settings, settings
from app.repositories.profile_repository import ProfileRepository
from app.repositories.room_repository import RoomRepository
from app.schemas.jobs import AnniversaryJobResult
from app.schemas.notification import PushContent
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PROGRESS_URL = "/app/progress"

REMINDER_DAYS = {7: "7_days", 1: "1_day", 0: "today"}

TEMPLATES: Dict[str, Dict[str, Dict[str, str]]] = {
    "en": {
        "today": {
            "title": "🎉 Happy Anniversary!",
            "body": "Today you celebrate {years} years together! 💕",
        },
        "1_day": {
            "title": "💕 Tomorrow is your anniversary!",
            "body": "You'll celebrate {years} years together tomorrow!",
        },
        "7_days": {
            "title": "💕 1 week until your anniversary!",
            "body": "In 7 days you'll celebrate {years} years together!",
        },
    },
    "no": {
        "today": {
            "title": "🎉 Gratulerer med årsdagen!",
            "body": "I dag feirer dere {years} år sammen! 💕",
        },
        "1_day": {
            "title": "💕 I morgen er årsdagen deres!",
            "body": "Dere fyller {years} år sammen i morgen!",
        },
        "7_days": {
            "title": "💕 1 uke til årsdagen!",
            "body": "Om 7 dager feirer dere {years} år sammen!",
        },
    },
}


def anniversary_in_year(anniversary: date, year: int) -> date:
    """The anniversary's month/day in a given year; Feb 29 becomes Feb 28 in non-leap years."""
    if anniversary.month == 2 and anniversary.day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return anniversary.replace(year=year)


def next_occurrence(anniversary: date, today: date) -> date:
    """First anniversary on or after today."""
    occurrence = anniversary_in_year(anniversary, today.year)
    if occurrence < today:
        occurrence = anniversary_in_year(anniversary, today.year + 1)
    return occurrence


def reminder_type_for(days_until: int) -> Optional[str]:
    return REMINDER_DAYS.get(days_until)


def render_reminder(locale: Optional[str], reminder_type: str, years: int) -> Dict[str, str]:
    templates = TEMPLATES.get(locale or "") or TEMPLATES[settings.DEFAULT_LOCALE]
    template = templates[reminder_type]
    return {
        "title": template["title"],
        "body": template["body"].format(years=years),
    }


class AnniversaryService:

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.room_repo = RoomRepository(db)
        self.profile_repo = ProfileRepository(db)
        self.notifications = notifications or NotificationService(db)

    def send_anniversary_reminders(self, now: Optional[datetime] = None) -> AnniversaryJobResult:
        """
        Push anniversary reminders for rooms whose anniversary is 7, 1 or 0
        days away (UTC calendar date). Counts one per member pushed.
        """
        require_settings("VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY")
        now = now or datetime.now(timezone.utc)
        today = now.astimezone(timezone.utc).date() if now.tzinfo else now.date()
        result = AnniversaryJobResult()

        due = []
        for room in self.room_repo.get_with_anniversary():
            if room.anniversary_date > today:
                continue
            occurrence = next_occurrence(room.anniversary_date, today)
            reminder_type = reminder_type_for((occurrence - today).days)
            if reminder_type is None:
                continue
            due.append((room, occurrence, reminder_type, self.room_repo.get_member_ids(room.id)))

        if not due:
            logger.info("Anniversary reminders for %s: none due", today.isoformat())
            return result

        # One locale lookup for every recipient of this run
        locales = self.profile_repo.get_locales(
            profile_id for _, _, _, member_ids in due for profile_id in member_ids
        )

        for room, occurrence, reminder_type, member_ids in due:
            years = occurrence.year - room.anniversary_date.year
            tag = f"anniversary-{room.id}-{occurrence.year}-{reminder_type}"
            for profile_id in member_ids:
                text = render_reminder(locales.get(profile_id), reminder_type, years)
                message = PushContent(url=PROGRESS_URL, tag=tag, badge=1, **text)
                try:
                    self.notifications.notify(profile_id, message, kind="anniversary")
                    result.sent += 1
                except Exception:
                    logger.error(
                        "Anniversary reminder %s for profile %s failed",
                        tag, profile_id, exc_info=True,
                    )
                    self.db.rollback()

        logger.info("Anniversary reminders for %s: sent=%d", today.isoformat(), result.sent)
        return result
