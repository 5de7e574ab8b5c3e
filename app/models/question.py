from sqlalchemy import String, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, Optional, TYPE_CHECKING
from app.models.base import BaseModel, RoomScoped, DATE_KEY_LENGTH

if TYPE_CHECKING:
    from app.models.room import Room
    from app.models.profile import Profile


class Question(BaseModel):
    """Immutable question shared by every room."""

    __tablename__ = "questions"

    text: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)


class DailyQuestion(RoomScoped, BaseModel):
    """
    The question a room answers on one business day.
    One per (room, date_key); never updated or deleted once assigned.
    """

    __tablename__ = "daily_questions"
    __table_args__ = (
        UniqueConstraint("room_id", "date_key", name="uq_daily_question_room_date"),
    )

    date_key: Mapped[str] = mapped_column(String(DATE_KEY_LENGTH), nullable=False, index=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    room: Mapped["Room"] = relationship("Room", lazy="selectin")
    question: Mapped["Question"] = relationship("Question", lazy="selectin")
    answers: Mapped[List["Answer"]] = relationship(
        "Answer",
        back_populates="daily_question",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def answer_for(self, profile_id: int) -> Optional["Answer"]:
        return next((a for a in self.answers if a.profile_id == profile_id), None)

    def partner_answer_for(self, profile_id: int) -> Optional["Answer"]:
        return next((a for a in self.answers if a.profile_id != profile_id), None)


class Answer(BaseModel):
    """A member's answer; at most one per daily question, no edit path."""

    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("daily_question_id", "profile_id", name="uq_answer_question_profile"),
    )

    daily_question_id: Mapped[int] = mapped_column(
        ForeignKey("daily_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)

    daily_question: Mapped["DailyQuestion"] = relationship(
        "DailyQuestion", back_populates="answers", lazy="selectin"
    )
    profile: Mapped["Profile"] = relationship("Profile", lazy="selectin")


class Reaction(BaseModel):
    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("daily_question_id", "profile_id", name="uq_reaction_question_profile"),
    )

    daily_question_id: Mapped[int] = mapped_column(
        ForeignKey("daily_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    emoji: Mapped[Optional[str]] = mapped_column(String(16), nullable=True, default=None)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)


class QuestionMessage(BaseModel):
    __tablename__ = "question_messages"

    daily_question_id: Mapped[int] = mapped_column(
        ForeignKey("daily_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
