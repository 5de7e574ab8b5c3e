from pydantic import BaseModel


class DailyQuestionJobResult(BaseModel):
    success: bool = True
    date_key: str
    added: int = 0
    skipped: int = 0
    failed: int = 0


class ReminderJobResult(BaseModel):
    success: bool = True
    reminders_sent: int = 0
    events_processed: int = 0
    tasks_processed: int = 0


class AnniversaryJobResult(BaseModel):
    success: bool = True
    sent: int = 0
