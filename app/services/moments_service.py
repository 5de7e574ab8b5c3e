import calendar
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exception import BadRequestException, ResourceNotFoundException
from app.models.moments import DailyLog, Memory, Milestone, MoodCheckin, Nudge
from app.models.planner import DateCompletion
from app.models.profile import Profile
from app.models.room import Room
from app.repositories.moments_repository import (
    DailyLogRepository,
    MemoryRepository,
    MilestoneRepository,
    MoodCheckinRepository,
    NudgeRepository,
)
from app.repositories.planner_repository import DateCompletionRepository
from app.repositories.question_repository import DailyQuestionRepository
from app.repositories.room_repository import RoomRepository
from app.schemas.moments import (
    DailyLogCreate,
    DailyLogResponse,
    MemoryCreate,
    MemoryResponse,
    MilestoneCreate,
    MilestoneResponse,
    MoodCheckinCreate,
    MoodCheckinResponse,
    NudgeCreate,
    NudgeResponse,
    RecapResponse,
)
from app.schemas.notification import PushContent
from app.services.notification_service import NotificationService
from app.utils.date_keys import business_date_key, date_key_for, utc_now

logger = logging.getLogger(__name__)

RECENT_NUDGES = 20


class MomentsService:
    """Memories, milestones, nudges, moods, the journal and recaps."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.memory_repo = MemoryRepository(db)
        self.milestone_repo = MilestoneRepository(db)
        self.nudge_repo = NudgeRepository(db)
        self.mood_repo = MoodCheckinRepository(db)
        self.log_repo = DailyLogRepository(db)
        self.daily_repo = DailyQuestionRepository(db)
        self.completion_repo = DateCompletionRepository(db)
        self.room_repo = RoomRepository(db)
        self.notifications = notifications or NotificationService(db)

    # Memories

    def list_memories(self, room: Room, profile: Profile) -> List[MemoryResponse]:
        favorites = self.memory_repo.get_favorite_ids(room.id, profile.id)
        return [
            self._memory_response(memory, memory.id in favorites)
            for memory in self.memory_repo.list_in_date_range(room.id)
        ]

    def get_memory(self, room: Room, profile: Profile, memory_id: int) -> MemoryResponse:
        memory = self._get_memory(room, memory_id)
        return self._memory_response(memory, self.memory_repo.is_favorite(memory.id, profile.id))

    def create_memory(self, room: Room, profile: Profile, data: MemoryCreate) -> MemoryResponse:
        memory = self.memory_repo.create(
            Memory(
                room_id=room.id,
                created_by_id=profile.id,
                title=data.title.strip(),
                description=data.description,
                date_key=data.date_key or business_date_key(),
                image_path=data.image_path,
            )
        )
        return self._memory_response(memory, False)

    def delete_memory(self, room: Room, memory_id: int) -> bool:
        memory = self._get_memory(room, memory_id)
        return self.memory_repo.delete(memory.id)

    def toggle_favorite(self, room: Room, profile: Profile, memory_id: int) -> MemoryResponse:
        memory = self._get_memory(room, memory_id)
        if self.memory_repo.is_favorite(memory.id, profile.id):
            self.memory_repo.remove_favorite(memory.id, profile.id)
            favorite = False
        else:
            self.memory_repo.add_favorite(memory.id, profile.id)
            favorite = True
        return self._memory_response(memory, favorite)

    def _get_memory(self, room: Room, memory_id: int) -> Memory:
        memory = self.memory_repo.get_in_room(memory_id, room.id)
        if not memory:
            raise ResourceNotFoundException("Memory", memory_id)
        return memory

    def _memory_response(self, memory: Memory, is_favorite: bool) -> MemoryResponse:
        response = MemoryResponse.model_validate(memory)
        response.is_favorite = is_favorite
        return response

    # Milestones

    def list_milestones(self, room: Room) -> List[MilestoneResponse]:
        return [
            MilestoneResponse.model_validate(m)
            for m in self.milestone_repo.list_in_date_range(room.id)
        ]

    def create_milestone(self, room: Room, profile: Profile, data: MilestoneCreate) -> MilestoneResponse:
        milestone = self.milestone_repo.create(
            Milestone(
                room_id=room.id,
                created_by_id=profile.id,
                title=data.title.strip(),
                description=data.description,
                date_key=data.date_key or business_date_key(),
            )
        )
        return MilestoneResponse.model_validate(milestone)

    def delete_milestone(self, room: Room, milestone_id: int) -> bool:
        milestone = self.milestone_repo.get_in_room(milestone_id, room.id)
        if not milestone:
            raise ResourceNotFoundException("Milestone", milestone_id)
        return self.milestone_repo.delete(milestone.id)

    # Nudges

    def send_nudge(self, room: Room, profile: Profile, data: NudgeCreate) -> NudgeResponse:
        """Store a nudge and notify the partner, if there is one yet."""
        nudge = self.nudge_repo.create(
            Nudge(
                room_id=room.id,
                sender_id=profile.id,
                emoji=data.emoji,
                message=data.message,
                date_key=business_date_key(),
            )
        )

        sender = profile.display_name or "Your partner"
        content = PushContent(
            title=f"{data.emoji} {sender} is thinking of you",
            body=data.message or "You got a nudge!",
            url="/app/nudge",
            tag=f"nudge-{nudge.id}",
            badge=1,
        )
        for partner_id in self.room_repo.get_member_ids(room.id):
            if partner_id == profile.id:
                continue
            try:
                self.notifications.notify(partner_id, content, kind="nudge")
            except Exception:
                logger.error("Nudge %s could not be delivered to %s", nudge.id, partner_id, exc_info=True)
                self.db.rollback()

        return NudgeResponse.model_validate(nudge)

    def list_nudges(self, room: Room) -> List[NudgeResponse]:
        return [
            NudgeResponse.model_validate(n)
            for n in self.nudge_repo.list_in_room(room.id, limit=RECENT_NUDGES)
        ]

    def mark_nudges_seen(self, room: Room, profile: Profile) -> int:
        unseen = self.nudge_repo.get_unseen_from_partner(room.id, profile.id)
        return self.nudge_repo.mark_seen(unseen, utc_now())

    # Mood check-ins

    def create_mood(self, room: Room, profile: Profile, data: MoodCheckinCreate) -> MoodCheckinResponse:
        checkin = self.mood_repo.create(
            MoodCheckin(
                room_id=room.id,
                profile_id=profile.id,
                mood=data.mood,
                note=data.note,
                date_key=business_date_key(),
            )
        )
        return MoodCheckinResponse.model_validate(checkin)

    def list_moods(
        self, room: Room, start_key: Optional[str] = None, end_key: Optional[str] = None
    ) -> List[MoodCheckinResponse]:
        return [
            MoodCheckinResponse.model_validate(m)
            for m in self.mood_repo.list_in_date_range(room.id, start_key, end_key)
        ]

    # Journal

    def create_log(self, room: Room, profile: Profile, data: DailyLogCreate) -> DailyLogResponse:
        if not data.text and not data.image_path:
            raise BadRequestException("A journal entry needs text or a photo")

        log = self.log_repo.create(
            DailyLog(
                room_id=room.id,
                author_id=profile.id,
                date_key=data.date_key or business_date_key(),
                text=data.text,
                image_path=data.image_path,
            )
        )
        return DailyLogResponse.model_validate(log)

    def list_logs(self, room: Room, date_key: Optional[str] = None) -> List[DailyLogResponse]:
        return [
            DailyLogResponse.model_validate(log)
            for log in self.log_repo.list_in_date_range(room.id, date_key, date_key)
        ]

    # Recap

    def get_recap(self, room: Room, year: int, month: Optional[int] = None) -> RecapResponse:
        """Counts of what the room did in a calendar year or month."""
        if not 1 <= year <= 9999 or (month is not None and not 1 <= month <= 12):
            raise BadRequestException("Invalid recap period")

        if month is None:
            start, end = date(year, 1, 1), date(year, 12, 31)
        else:
            start = date(year, month, 1)
            end = date(year, month, calendar.monthrange(year, month)[1])
        start_key, end_key = date_key_for(start), date_key_for(end)

        completed = sum(
            1
            for daily in self.daily_repo.list_in_date_range(room.id, start_key, end_key)
            if len({answer.profile_id for answer in daily.answers}) >= 2
        )

        return RecapResponse(
            year=year,
            month=month,
            start_key=start_key,
            end_key=end_key,
            questions_completed=completed,
            nudges_sent=self.nudge_repo.count_in_date_range(room.id, start_key, end_key),
            mood_checkins=self.mood_repo.count_in_date_range(room.id, start_key, end_key),
            memories=self.memory_repo.count_in_date_range(room.id, start_key, end_key),
            milestones=self.milestone_repo.count_in_date_range(room.id, start_key, end_key),
            dates_completed=self.completion_repo.count_in_date_range(
                room.id, start_key, end_key,
                DateCompletion.completed_at.isnot(None),
            ),
        )
