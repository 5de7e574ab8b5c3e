from pydantic import BaseModel
from typing import Optional, List, Literal


class DayActivity(BaseModel):
    date_key: str
    status: Literal["both", "one", "missed"]
    answered_by_me: bool = False


class ActivityStats(BaseModel):
    current_streak: int = 0
    best_streak: int = 0
    total_answered: int = 0


class TimeTogether(BaseModel):
    total_days: int
    years: int
    months: int
    days: int


class NextMilestone(BaseModel):
    days: int
    date_key: str
    days_remaining: int


class ProgressResponse(BaseModel):
    stats: ActivityStats
    heatmap: List[DayActivity]
    time_together: Optional[TimeTogether] = None
    next_milestone: Optional[NextMilestone] = None
