import logging
import random
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exception import (
    BadRequestException,
    DuplicateResourceException,
    ResourceNotFoundException,
)
from app.models.profile import Profile
from app.models.question import Answer, DailyQuestion, QuestionMessage, Reaction
from app.models.room import Room
from app.repositories.question_repository import (
    AnswerRepository,
    DailyQuestionRepository,
    QuestionMessageRepository,
    QuestionRepository,
    ReactionRepository,
)
from app.repositories.room_repository import RoomRepository
from app.schemas.jobs import DailyQuestionJobResult
from app.schemas.question import (
    AnswerCreate,
    AnswerResponse,
    DailyQuestionDetailResponse,
    DailyQuestionResponse,
    MessageCreate,
    MessageResponse,
    QuestionHistoryItem,
    QuestionResponse,
    ReactionResponse,
    ReactionUpdate,
)
from app.utils.date_keys import business_date_key, parse_date_key

logger = logging.getLogger(__name__)


class DailyQuestionService:
    """Assignment of daily questions to rooms, and everything members do with them."""

    def __init__(self, db: Session, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()
        self.question_repo = QuestionRepository(db)
        self.daily_repo = DailyQuestionRepository(db)
        self.answer_repo = AnswerRepository(db)
        self.reaction_repo = ReactionRepository(db)
        self.message_repo = QuestionMessageRepository(db)
        self.room_repo = RoomRepository(db)

    # Assignment

    def assign_daily_questions(self, now: Optional[datetime] = None) -> DailyQuestionJobResult:
        """
        Give every room a question for the current business day.

        Safe to run any number of times per day: a room that already has its
        question is counted as skipped. A database error for one room is
        logged and counted as failed without stopping the others.
        """
        date_key = business_date_key(now)
        result = DailyQuestionJobResult(date_key=date_key)

        pool = self.question_repo.get_all_ids()
        if not pool:
            logger.warning("Question pool is empty; no daily questions assigned for %s", date_key)
            return result

        for room_id in self.room_repo.get_all_ids():
            try:
                if self.daily_repo.get_for_date(room_id, date_key) is not None:
                    result.skipped += 1
                    continue

                question_id = self._pick_question(room_id, pool)
                if self.daily_repo.insert_if_absent(room_id, date_key, question_id):
                    result.added += 1
                else:
                    result.skipped += 1
            except SQLAlchemyError:
                logger.error("Failed to assign daily question for room %s", room_id, exc_info=True)
                self.db.rollback()
                result.failed += 1

        logger.info(
            "Daily questions for %s: added=%d skipped=%d failed=%d",
            date_key, result.added, result.skipped, result.failed,
        )
        return result

    def _pick_question(self, room_id: int, pool: List[int]) -> int:
        """Random question the room has not had among its recent assignments."""
        recent = set(
            self.daily_repo.get_recent_question_ids(room_id, settings.RECENT_QUESTION_WINDOW)
        )
        eligible = [question_id for question_id in pool if question_id not in recent]
        return self.rng.choice(eligible or pool)

    def ensure_today(
        self, room: Room, profile: Profile, now: Optional[datetime] = None
    ) -> DailyQuestionResponse:
        """
        Today's question for the caller's room, assigning one if the
        scheduled job has not run yet.

        Tries the atomic insert first, then a plain read, then a plain
        insert that tolerates losing a race to a concurrent caller.
        """
        date_key = business_date_key(now)

        try:
            daily = self._ensure_atomic(room.id, date_key)
        except SQLAlchemyError:
            logger.warning("Atomic ensure failed for room %s on %s", room.id, date_key, exc_info=True)
            self.db.rollback()
            daily = self.daily_repo.get_for_date(room.id, date_key)

        if daily is None:
            daily = self._insert_fallback(room.id, date_key)

        if daily is None:
            raise ResourceNotFoundException("Daily question", date_key)

        return self._to_response(daily, profile.id)

    def _ensure_atomic(self, room_id: int, date_key: str) -> Optional[DailyQuestion]:
        pool = self.question_repo.get_all_ids()
        if pool:
            self.daily_repo.insert_if_absent(room_id, date_key, self._pick_question(room_id, pool))
        return self.daily_repo.get_for_date(room_id, date_key)

    def _insert_fallback(self, room_id: int, date_key: str) -> Optional[DailyQuestion]:
        pool = self.question_repo.get_all_ids()
        if not pool:
            return None

        daily = DailyQuestion(
            room_id=room_id, date_key=date_key, question_id=self._pick_question(room_id, pool)
        )
        try:
            return self.daily_repo.create(daily)
        except IntegrityError:
            # Another member's request assigned it first
            self.db.rollback()
            return self.daily_repo.get_for_date(room_id, date_key)

    # Reading

    def get_history(self, room: Room, profile: Profile, limit: int = 30) -> List[QuestionHistoryItem]:
        """Most recent daily questions of the room with how far each got."""
        items = []
        for daily in self.daily_repo.get_page(room.id, limit=limit):
            answered = {answer.profile_id for answer in daily.answers}
            if len(answered) >= 2:
                status = "completed"
            elif answered:
                status = "waiting"
            else:
                status = "missed"
            items.append(
                QuestionHistoryItem(
                    id=daily.id,
                    date_key=daily.date_key,
                    question=QuestionResponse.model_validate(daily.question),
                    status=status,
                    answered_by_me=profile.id in answered,
                )
            )
        return items

    def get_by_date(self, room: Room, profile: Profile, date_key: str) -> DailyQuestionDetailResponse:
        try:
            parse_date_key(date_key)
        except ValueError:
            raise BadRequestException(f"'{date_key}' is not a valid date key (YYYY-MM-DD)")

        daily = self.daily_repo.get_for_date(room.id, date_key)
        if not daily:
            raise ResourceNotFoundException("Daily question", date_key)

        reactions = self.reaction_repo.list_for_question(daily.id)
        mine = next((r for r in reactions if r.profile_id == profile.id), None)
        partner = next((r for r in reactions if r.profile_id != profile.id), None)
        messages = self.message_repo.list_for_question(daily.id)

        return self._to_response(
            daily,
            profile.id,
            response_cls=DailyQuestionDetailResponse,
            my_reaction=ReactionResponse.model_validate(mine) if mine else None,
            partner_reaction=ReactionResponse.model_validate(partner) if partner else None,
            messages=[MessageResponse.model_validate(m) for m in messages],
        )

    # Engagement

    def submit_answer(
        self, room: Room, profile: Profile, daily_question_id: int, data: AnswerCreate
    ) -> AnswerResponse:
        """
        Record the caller's answer. Answers cannot be edited, so a second
        answer to the same question is a conflict.
        """
        daily = self._get_daily(room, daily_question_id)

        if self.answer_repo.get_for_profile(daily.id, profile.id):
            raise DuplicateResourceException("Answer to daily question", str(daily.id))

        answer = Answer(
            daily_question_id=daily.id,
            profile_id=profile.id,
            answer_text=data.answer_text.strip(),
        )
        try:
            answer = self.answer_repo.create(answer)
        except IntegrityError:
            self.db.rollback()
            raise DuplicateResourceException("Answer to daily question", str(daily.id))

        return AnswerResponse.model_validate(answer)

    def set_reaction(
        self, room: Room, profile: Profile, daily_question_id: int, data: ReactionUpdate
    ) -> Optional[ReactionResponse]:
        """
        Set or toggle the caller's reaction.

        Sending the current emoji again clears it; the row is removed once
        neither an emoji nor a comment is left. Returns None in that case.
        """
        daily = self._get_daily(room, daily_question_id)
        reaction = self.reaction_repo.get_for_profile(daily.id, profile.id)

        if reaction is None:
            if data.emoji is None and not data.comment:
                return None
            reaction = self.reaction_repo.create(
                Reaction(
                    daily_question_id=daily.id,
                    profile_id=profile.id,
                    emoji=data.emoji,
                    comment=data.comment or None,
                )
            )
            return ReactionResponse.model_validate(reaction)

        if data.emoji is not None:
            reaction.emoji = None if reaction.emoji == data.emoji else data.emoji
        if data.comment is not None:
            reaction.comment = data.comment or None

        if reaction.emoji is None and reaction.comment is None:
            self.reaction_repo.delete(reaction.id)
            return None

        self.db.commit()
        self.db.refresh(reaction)
        return ReactionResponse.model_validate(reaction)

    def add_message(
        self, room: Room, profile: Profile, daily_question_id: int, data: MessageCreate
    ) -> MessageResponse:
        daily = self._get_daily(room, daily_question_id)
        message = self.message_repo.create(
            QuestionMessage(daily_question_id=daily.id, profile_id=profile.id, body=data.body.strip())
        )
        return MessageResponse.model_validate(message)

    def list_messages(self, room: Room, daily_question_id: int) -> List[MessageResponse]:
        daily = self._get_daily(room, daily_question_id)
        return [MessageResponse.model_validate(m) for m in self.message_repo.list_for_question(daily.id)]

    def _get_daily(self, room: Room, daily_question_id: int) -> DailyQuestion:
        daily = self.daily_repo.get_in_room(daily_question_id, room.id)
        if not daily:
            raise ResourceNotFoundException("Daily question", daily_question_id)
        return daily

    def _to_response(
        self,
        daily: DailyQuestion,
        profile_id: int,
        response_cls=DailyQuestionResponse,
        **extra,
    ):
        mine = daily.answer_for(profile_id)
        partner = daily.partner_answer_for(profile_id)
        return response_cls(
            id=daily.id,
            uuid=daily.uuid,
            date_key=daily.date_key,
            question=QuestionResponse.model_validate(daily.question),
            my_answer=AnswerResponse.model_validate(mine) if mine else None,
            # The partner's answer stays hidden until the caller has answered
            partner_answer=AnswerResponse.model_validate(partner) if mine and partner else None,
            partner_answered=partner is not None,
            **extra,
        )
