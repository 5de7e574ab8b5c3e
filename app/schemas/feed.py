from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional

FeedItemType = Literal[
    "question", "journal", "memory", "milestone", "event", "task", "dateplan", "nudge"
]


class FeedItem(BaseModel):
    type: FeedItemType
    date_key: str
    id: str
    data: Dict[str, Any]


class FeedPage(BaseModel):
    items: List[FeedItem]
    next_cursor: Optional[str] = None
    has_more: bool = False
