from sqlalchemy.orm import Session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.dialects import postgresql, sqlite
from typing import List, Optional
from app.models.question import (
    Question,
    DailyQuestion,
    Answer,
    Reaction,
    QuestionMessage,
)
from app.repositories.repository import BaseRepository


class QuestionRepository(BaseRepository[Question]):
    """Repository for the shared question pool."""

    def __init__(self, db: Session):
        super().__init__(Question, db)

    def get_all_ids(self) -> List[int]:
        return list(self.db.execute(select(Question.id).order_by(Question.id)).scalars().all())

    def get_existing_texts(self) -> set:
        return set(self.db.execute(select(Question.text)).scalars().all())


class DailyQuestionRepository(BaseRepository[DailyQuestion]):
    """Repository for per-room daily question assignments."""

    _DIALECT_INSERTS = {
        "postgresql": postgresql.insert,
        "sqlite": sqlite.insert,
    }

    def __init__(self, db: Session):
        super().__init__(DailyQuestion, db)

    def get_for_date(self, room_id: int, date_key: str) -> Optional[DailyQuestion]:
        return (
            self.db.query(DailyQuestion)
            .filter(DailyQuestion.room_id == room_id, DailyQuestion.date_key == date_key)
            .first()
        )

    def get_recent_question_ids(self, room_id: int, limit: int) -> List[int]:
        """Question ids of the room's most recent assignments, newest first."""
        stmt = (
            select(DailyQuestion.question_id)
            .where(DailyQuestion.room_id == room_id)
            .order_by(DailyQuestion.created_at.desc(), DailyQuestion.id.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def insert_if_absent(self, room_id: int, date_key: str, question_id: int) -> bool:
        """
        Atomically assign a question to (room, date_key).

        Uses INSERT ... ON CONFLICT DO NOTHING on the (room_id, date_key)
        unique constraint, so concurrent callers can never create two rows.

        Returns:
            True if this call inserted the row, False if one already existed
        """
        dialect = self.db.get_bind().dialect.name
        dialect_insert = self._DIALECT_INSERTS.get(dialect)
        if dialect_insert is None:
            return self._insert_guarded(room_id, date_key, question_id)

        stmt = (
            dialect_insert(DailyQuestion)
            .values(room_id=room_id, date_key=date_key, question_id=question_id)
            .on_conflict_do_nothing(index_elements=["room_id", "date_key"])
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1

    def _insert_guarded(self, room_id: int, date_key: str, question_id: int) -> bool:
        """Plain insert for dialects without ON CONFLICT; the unique constraint decides."""
        self.db.add(DailyQuestion(room_id=room_id, date_key=date_key, question_id=question_id))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        return True

    def get_page(
        self, room_id: int, before_key: Optional[str] = None, limit: int = 10
    ) -> List[DailyQuestion]:
        """A page of the room's daily questions, newest date first."""
        query = self.db.query(DailyQuestion).filter(DailyQuestion.room_id == room_id)
        if before_key is not None:
            query = query.filter(DailyQuestion.date_key < before_key)
        return query.order_by(DailyQuestion.date_key.desc()).limit(limit).all()

    def get_all_for_room(self, room_id: int, since_key: Optional[str] = None) -> List[DailyQuestion]:
        """All daily questions of a room, oldest first, with answers loaded."""
        query = self.db.query(DailyQuestion).filter(DailyQuestion.room_id == room_id)
        if since_key is not None:
            query = query.filter(DailyQuestion.date_key >= since_key)
        return query.order_by(DailyQuestion.date_key).all()


class AnswerRepository(BaseRepository[Answer]):

    def __init__(self, db: Session):
        super().__init__(Answer, db)

    def get_for_profile(self, daily_question_id: int, profile_id: int) -> Optional[Answer]:
        return (
            self.db.query(Answer)
            .filter(Answer.daily_question_id == daily_question_id, Answer.profile_id == profile_id)
            .first()
        )


class ReactionRepository(BaseRepository[Reaction]):

    def __init__(self, db: Session):
        super().__init__(Reaction, db)

    def get_for_profile(self, daily_question_id: int, profile_id: int) -> Optional[Reaction]:
        return (
            self.db.query(Reaction)
            .filter(Reaction.daily_question_id == daily_question_id, Reaction.profile_id == profile_id)
            .first()
        )

    def list_for_question(self, daily_question_id: int) -> List[Reaction]:
        return self.db.query(Reaction).filter(Reaction.daily_question_id == daily_question_id).all()


class QuestionMessageRepository(BaseRepository[QuestionMessage]):

    def __init__(self, db: Session):
        super().__init__(QuestionMessage, db)

    def list_for_question(self, daily_question_id: int) -> List[QuestionMessage]:
        return (
            self.db.query(QuestionMessage)
            .filter(QuestionMessage.daily_question_id == daily_question_id)
            .order_by(QuestionMessage.created_at, QuestionMessage.id)
            .all()
        )
