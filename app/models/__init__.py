from app.models.base import Base, BaseModel
from app.models.associations import room_members
from app.models.profile import Profile
from app.models.room import Room, MAX_ROOM_MEMBERS
from app.models.question import (
    Question,
    DailyQuestion,
    Answer,
    Reaction,
    QuestionMessage,
)
from app.models.planner import SharedEvent, SharedTask, DateIdea, DateCompletion
from app.models.moments import (
    Milestone,
    Memory,
    MemoryFavorite,
    MoodCheckin,
    Nudge,
    DailyLog,
)
from app.models.notification import Notification, PushSubscription

__all__ = [
    # Base
    "Base",
    "BaseModel",
    # Rooms
    "room_members",
    "Profile",
    "Room",
    "MAX_ROOM_MEMBERS",
    # Questions
    "Question",
    "DailyQuestion",
    "Answer",
    "Reaction",
    "QuestionMessage",
    # Planner
    "SharedEvent",
    "SharedTask",
    "DateIdea",
    "DateCompletion",
    # Moments
    "Milestone",
    "Memory",
    "MemoryFavorite",
    "MoodCheckin",
    "Nudge",
    "DailyLog",
    # Notifications
    "Notification",
    "PushSubscription",
]
