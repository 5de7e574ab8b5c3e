import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import require_settings, settings
from app.repositories.planner_repository import SharedEventRepository, SharedTaskRepository
from app.repositories.room_repository import RoomRepository
from app.schemas.jobs import ReminderJobResult
from app.schemas.notification import PushContent
from app.services.notification_service import NotificationService
from app.utils.date_keys import as_utc, utc_now

logger = logging.getLogger(__name__)

PLANNER_URL = "/app/planner"


class ReminderService:
    """Pushes due event and task reminders to both members of a room."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.event_repo = SharedEventRepository(db)
        self.task_repo = SharedTaskRepository(db)
        self.room_repo = RoomRepository(db)
        self.notifications = notifications or NotificationService(db)

    def send_due_reminders(self, now: Optional[datetime] = None) -> ReminderJobResult:
        """
        Scan for reminders whose time has come and send each exactly once.

        Members are notified first; the reminder guard is then flipped with a
        compare-and-set, and only rows whose guard this run set count as sent.
        """
        require_settings("VAPID_PUBLIC_KEY", "VAPID_PRIVATE_KEY")
        now = as_utc(now) or utc_now()
        result = ReminderJobResult()

        events = self.event_repo.get_due_reminders(now, settings.REMINDER_BATCH_LIMIT)
        result.events_processed = len(events)
        for event in events:
            message = PushContent(
                title="📅 Upcoming event",
                body=event.title,
                url=PLANNER_URL,
                tag=f"event-{event.id}",
                badge=1,
            )
            if self._remind(self.event_repo, event.id, event.room_id, message, now):
                result.reminders_sent += 1

        tasks = self.task_repo.get_due_reminders(now, settings.REMINDER_BATCH_LIMIT)
        result.tasks_processed = len(tasks)
        for task in tasks:
            message = PushContent(
                title="✅ Task reminder",
                body=task.title,
                url=PLANNER_URL,
                tag=f"task-{task.id}",
                badge=1,
            )
            if self._remind(self.task_repo, task.id, task.room_id, message, now):
                result.reminders_sent += 1

        logger.info(
            "Due reminders: sent=%d events=%d tasks=%d",
            result.reminders_sent, result.events_processed, result.tasks_processed,
        )
        return result

    def _remind(self, repo, row_id: int, room_id: int, message: PushContent, now: datetime) -> bool:
        for profile_id in self.room_repo.get_member_ids(room_id):
            try:
                self.notifications.notify(profile_id, message, kind="reminder")
            except Exception:
                logger.error(
                    "Reminder %s for profile %s could not be delivered",
                    message.tag, profile_id, exc_info=True,
                )
                self.db.rollback()

        try:
            return repo.mark_reminder_sent(row_id, now)
        except SQLAlchemyError:
            logger.error("Could not mark reminder %s as sent", message.tag, exc_info=True)
            self.db.rollback()
            return False
