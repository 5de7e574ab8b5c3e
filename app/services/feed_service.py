from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.config import settings
from app.core.exception import BadRequestException
from app.models.profile import Profile
from app.models.room import Room
from app.repositories.moments_repository import (
    DailyLogRepository,
    MemoryRepository,
    MilestoneRepository,
    NudgeRepository,
)
from app.repositories.planner_repository import (
    DateCompletionRepository,
    SharedEventRepository,
    SharedTaskRepository,
)
from app.repositories.question_repository import DailyQuestionRepository
from app.schemas.feed import FeedItem, FeedPage
from app.schemas.moments import (
    DailyLogResponse,
    MemoryResponse,
    MilestoneResponse,
    NudgeResponse,
)
from app.schemas.planner import DateCompletionResponse, EventResponse, TaskResponse
from app.utils.date_keys import as_utc, business_date_key, parse_date_key, shift_date_key

# Order of kinds within one day
TYPE_PRIORITY = {
    "question": 0,
    "journal": 1,
    "memory": 2,
    "milestone": 3,
    "event": 4,
    "task": 5,
    "dateplan": 6,
    "nudge": 7,
}


def merge_feed_items(items: List[FeedItem]) -> List[FeedItem]:
    """Newest day first; within a day, ordered by kind."""
    ordered = sorted(items, key=lambda item: TYPE_PRIORITY[item.type])
    return sorted(ordered, key=lambda item: item.date_key, reverse=True)


def in_range(date_key: str, start_key: Optional[str], end_key: Optional[str]) -> bool:
    if start_key is not None and date_key < start_key:
        return False
    if end_key is not None and date_key > end_key:
        return False
    return True


class FeedService:
    """
    The inbox: one list mixing everything that happened in the room.

    Paging follows daily questions only. Every other kind is loaded for the
    span of dates the current page of questions covers.
    """

    def __init__(self, db: Session):
        self.db = db
        self.daily_repo = DailyQuestionRepository(db)
        self.log_repo = DailyLogRepository(db)
        self.memory_repo = MemoryRepository(db)
        self.milestone_repo = MilestoneRepository(db)
        self.nudge_repo = NudgeRepository(db)
        self.event_repo = SharedEventRepository(db)
        self.task_repo = SharedTaskRepository(db)
        self.completion_repo = DateCompletionRepository(db)

    def build_feed(
        self,
        room: Room,
        profile: Profile,
        before: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> FeedPage:
        if before is not None:
            try:
                parse_date_key(before)
            except ValueError:
                raise BadRequestException(f"'{before}' is not a valid date key (YYYY-MM-DD)")

        page_size = page_size or settings.FEED_PAGE_SIZE
        dailies = self.daily_repo.get_page(room.id, before_key=before, limit=page_size)
        has_more = len(dailies) == page_size

        # Upper bound stays open on the first page so upcoming items show;
        # lower bound opens once there are no older questions left.
        end_key = shift_date_key(before, -1) if before is not None else None
        start_key = dailies[-1].date_key if dailies and has_more else None

        items: List[FeedItem] = []
        for daily in dailies:
            answered = {answer.profile_id for answer in daily.answers}
            items.append(
                FeedItem(
                    type="question",
                    date_key=daily.date_key,
                    id=str(daily.id),
                    data={
                        "daily_question_id": daily.id,
                        "text": daily.question.text,
                        "category": daily.question.category,
                        "answer_count": len(answered),
                        "answered_by_me": profile.id in answered,
                    },
                )
            )

        items.extend(self._journal_items(room.id, start_key, end_key))
        items.extend(
            self._items("memory", MemoryResponse, self.memory_repo.list_in_date_range(room.id, start_key, end_key))
        )
        items.extend(
            self._items("milestone", MilestoneResponse, self.milestone_repo.list_in_date_range(room.id, start_key, end_key))
        )
        items.extend(
            self._items("event", EventResponse, self.event_repo.list_in_date_range(room.id, start_key, end_key))
        )
        items.extend(self._task_items(room.id, start_key, end_key))
        items.extend(
            self._items("dateplan", DateCompletionResponse, self.completion_repo.list_in_date_range(room.id, start_key, end_key))
        )
        items.extend(
            self._items("nudge", NudgeResponse, self.nudge_repo.list_in_date_range(room.id, start_key, end_key))
        )

        return FeedPage(
            items=merge_feed_items(items),
            next_cursor=dailies[-1].date_key if has_more else None,
            has_more=has_more,
        )

    def _items(self, kind: str, schema, rows) -> List[FeedItem]:
        return [
            FeedItem(
                type=kind,
                date_key=row.date_key,
                id=str(row.id),
                data=schema.model_validate(row).model_dump(mode="json"),
            )
            for row in rows
        ]

    def _journal_items(
        self, room_id: int, start_key: Optional[str], end_key: Optional[str]
    ) -> List[FeedItem]:
        """One item per author and day, holding that day's entries."""
        grouped: Dict[Tuple[int, str], List[dict]] = defaultdict(list)
        for log in self.log_repo.list_in_date_range(room_id, start_key, end_key):
            grouped[(log.author_id, log.date_key)].append(
                DailyLogResponse.model_validate(log).model_dump(mode="json")
            )

        return [
            FeedItem(
                type="journal",
                date_key=date_key,
                id=f"{author_id}-{date_key}",
                data={"author_id": author_id, "entries": sorted(entries, key=lambda e: e["id"])},
            )
            for (author_id, date_key), entries in grouped.items()
        ]

    def _task_items(
        self, room_id: int, start_key: Optional[str], end_key: Optional[str]
    ) -> List[FeedItem]:
        """Tasks land on their due day, or on the day they were created."""
        items = []
        for task in self.task_repo.list_for_room(room_id):
            date_key = task.due_date_key or business_date_key(as_utc(task.created_at))
            if not in_range(date_key, start_key, end_key):
                continue
            items.append(
                FeedItem(
                    type="task",
                    date_key=date_key,
                    id=str(task.id),
                    data=TaskResponse.model_validate(task).model_dump(mode="json"),
                )
            )
        return items
