from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_service_role
from app.schemas.jobs import AnniversaryJobResult, DailyQuestionJobResult, ReminderJobResult
from app.services.anniversary_service import AnniversaryService
from app.services.daily_question_service import DailyQuestionService
from app.services.reminder_service import ReminderService

# Called by the external cron with the service-role key
router = APIRouter(dependencies=[Depends(require_service_role)])


@router.post("/daily-questions", response_model=DailyQuestionJobResult)
async def assign_daily_questions(db: Session = Depends(get_db)):
    """Assign today's question to every room (runs at 06:00 Europe/Oslo)."""
    return DailyQuestionService(db).assign_daily_questions()


@router.post("/due-reminders", response_model=ReminderJobResult)
async def send_due_reminders(db: Session = Depends(get_db)):
    """Push event and task reminders that are due (runs every 5 minutes)."""
    return ReminderService(db).send_due_reminders()


@router.post("/anniversary-reminders", response_model=AnniversaryJobResult)
async def send_anniversary_reminders(db: Session = Depends(get_db)):
    """Push anniversary reminders (runs daily at 08:00 UTC)."""
    return AnniversaryService(db).send_anniversary_reminders()
