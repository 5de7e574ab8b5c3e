from sqlalchemy.orm import Session
from sqlalchemy import delete, select
from typing import List, Set
from datetime import datetime
from app.models.moments import (
    Milestone,
    Memory,
    MemoryFavorite,
    MoodCheckin,
    Nudge,
    DailyLog,
)
from app.repositories.repository import BaseRepository


class MilestoneRepository(BaseRepository[Milestone]):

    def __init__(self, db: Session):
        super().__init__(Milestone, db)


class MemoryRepository(BaseRepository[Memory]):

    def __init__(self, db: Session):
        super().__init__(Memory, db)

    def get_favorite_ids(self, room_id: int, profile_id: int) -> Set[int]:
        stmt = (
            select(MemoryFavorite.memory_id)
            .join(Memory, Memory.id == MemoryFavorite.memory_id)
            .where(Memory.room_id == room_id, MemoryFavorite.profile_id == profile_id)
        )
        return set(self.db.execute(stmt).scalars().all())

    def is_favorite(self, memory_id: int, profile_id: int) -> bool:
        return (
            self.db.query(MemoryFavorite)
            .filter(MemoryFavorite.memory_id == memory_id, MemoryFavorite.profile_id == profile_id)
            .first()
            is not None
        )

    def add_favorite(self, memory_id: int, profile_id: int) -> None:
        self.db.add(MemoryFavorite(memory_id=memory_id, profile_id=profile_id))
        self.db.commit()

    def remove_favorite(self, memory_id: int, profile_id: int) -> None:
        self.db.execute(
            delete(MemoryFavorite).where(
                MemoryFavorite.memory_id == memory_id,
                MemoryFavorite.profile_id == profile_id,
            )
        )
        self.db.commit()


class MoodCheckinRepository(BaseRepository[MoodCheckin]):

    def __init__(self, db: Session):
        super().__init__(MoodCheckin, db)


class NudgeRepository(BaseRepository[Nudge]):

    def __init__(self, db: Session):
        super().__init__(Nudge, db)

    def get_unseen_from_partner(self, room_id: int, profile_id: int) -> List[Nudge]:
        return (
            self.db.query(Nudge)
            .filter(
                Nudge.room_id == room_id,
                Nudge.sender_id != profile_id,
                Nudge.seen_at.is_(None),
            )
            .all()
        )

    def mark_seen(self, nudges: List[Nudge], seen_at: datetime) -> int:
        for nudge in nudges:
            nudge.seen_at = seen_at
        self.db.commit()
        return len(nudges)


class DailyLogRepository(BaseRepository[DailyLog]):

    def __init__(self, db: Session):
        super().__init__(DailyLog, db)
