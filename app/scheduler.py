"""
In-process scheduling of the periodic jobs.

Production runs these through an external cron calling /api/v1/jobs/*.
Setting SCHEDULER_ENABLED runs the same jobs inside the API process instead.
"""
import logging

import pytz
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import settings
from app.database import session_scope
from app.services.anniversary_service import AnniversaryService
from app.services.daily_question_service import DailyQuestionService
from app.services.reminder_service import ReminderService

logger = logging.getLogger(__name__)


def daily_questions_job():
    logger.info("Starting daily question assignment...")
    try:
        with session_scope() as db:
            result = DailyQuestionService(db).assign_daily_questions()
        logger.info("Daily question assignment finished: %s", result.model_dump())
    except Exception:
        logger.exception("Daily question assignment failed")


def due_reminders_job():
    try:
        with session_scope() as db:
            result = ReminderService(db).send_due_reminders()
        if result.events_processed or result.tasks_processed:
            logger.info("Due reminders finished: %s", result.model_dump())
    except Exception:
        logger.exception("Due reminder scan failed")


def anniversary_reminders_job():
    logger.info("Starting anniversary reminders...")
    try:
        with session_scope() as db:
            result = AnniversaryService(db).send_anniversary_reminders()
        logger.info("Anniversary reminders finished: %s", result.model_dump())
    except Exception:
        logger.exception("Anniversary reminders failed")


class JobScheduler:
    """Owns the BackgroundScheduler running the three periodic jobs."""

    def __init__(self):
        self.scheduler = BackgroundScheduler(job_defaults={"misfire_grace_time": 60})

    def start(self):
        if self.scheduler.running:
            return

        self.scheduler.add_job(
            func=daily_questions_job,
            trigger=CronTrigger(
                hour=settings.DAY_CUTOFF_HOUR, minute=0, timezone=pytz.timezone(settings.DAY_TIMEZONE)
            ),
            id="daily_questions",
            name="Assign daily questions",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=due_reminders_job,
            trigger=CronTrigger(minute="*/5", timezone=pytz.utc),
            id="due_reminders",
            name="Send due event and task reminders",
            replace_existing=True,
        )
        self.scheduler.add_job(
            func=anniversary_reminders_job,
            trigger=CronTrigger(hour=8, minute=0, timezone=pytz.utc),
            id="anniversary_reminders",
            name="Send anniversary reminders",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Job scheduler started")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("Job scheduler stopped")


job_scheduler = JobScheduler()
