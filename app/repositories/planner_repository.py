from sqlalchemy.orm import Session
from sqlalchemy import update, or_
from typing import List, Optional
from datetime import datetime
from app.models.planner import SharedEvent, SharedTask, DateIdea, DateCompletion
from app.repositories.repository import BaseRepository


class _ReminderMixin:
    """Due-reminder queries shared by events and tasks."""

    db: Session

    def get_due_reminders(self, now: datetime, limit: int) -> list:
        return (
            self.db.query(self.model)
            .filter(
                self.model.reminder_at.isnot(None),
                self.model.reminder_at <= now,
                self.model.reminder_sent_at.is_(None),
                *self._extra_due_filters(),
            )
            .order_by(self.model.reminder_at, self.model.id)
            .limit(limit)
            .all()
        )

    def _extra_due_filters(self) -> list:
        return []

    def mark_reminder_sent(self, id: int, now: datetime) -> bool:
        """
        Compare-and-set the reminder guard.

        Only updates while reminder_sent_at is still NULL, so exactly one
        caller ever flips it.

        Returns:
            True if this call set the guard
        """
        result = self.db.execute(
            update(self.model)
            .where(self.model.id == id, self.model.reminder_sent_at.is_(None))
            .values(reminder_sent_at=now)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1


class SharedEventRepository(_ReminderMixin, BaseRepository[SharedEvent]):

    def __init__(self, db: Session):
        super().__init__(SharedEvent, db)

    def list_upcoming(self, room_id: int, from_key: str) -> List[SharedEvent]:
        return (
            self.db.query(SharedEvent)
            .filter(SharedEvent.room_id == room_id, SharedEvent.date_key >= from_key)
            .order_by(SharedEvent.start_at, SharedEvent.id)
            .all()
        )

    def list_all(self, room_id: int) -> List[SharedEvent]:
        return (
            self.db.query(SharedEvent)
            .filter(SharedEvent.room_id == room_id)
            .order_by(SharedEvent.start_at, SharedEvent.id)
            .all()
        )


class SharedTaskRepository(_ReminderMixin, BaseRepository[SharedTask]):

    def __init__(self, db: Session):
        super().__init__(SharedTask, db)

    def _extra_due_filters(self) -> list:
        return [SharedTask.is_done.is_(False)]

    def list_for_room(self, room_id: int, include_done: bool = True) -> List[SharedTask]:
        query = self.db.query(SharedTask).filter(SharedTask.room_id == room_id)
        if not include_done:
            query = query.filter(SharedTask.is_done.is_(False))
        return query.order_by(SharedTask.is_done, SharedTask.due_at, SharedTask.id).all()


class DateIdeaRepository(BaseRepository[DateIdea]):

    def __init__(self, db: Session):
        super().__init__(DateIdea, db)

    def list_available(self, room_id: int) -> List[DateIdea]:
        """Shared catalogue plus the room's own ideas."""
        return (
            self.db.query(DateIdea)
            .filter(or_(DateIdea.room_id.is_(None), DateIdea.room_id == room_id))
            .order_by(DateIdea.category, DateIdea.title)
            .all()
        )

    def get_available(self, id: int, room_id: int) -> Optional[DateIdea]:
        return (
            self.db.query(DateIdea)
            .filter(DateIdea.id == id, or_(DateIdea.room_id.is_(None), DateIdea.room_id == room_id))
            .first()
        )


class DateCompletionRepository(BaseRepository[DateCompletion]):

    def __init__(self, db: Session):
        super().__init__(DateCompletion, db)
