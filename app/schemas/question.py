from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime


class QuestionResponse(BaseModel):
    id: int
    text: str
    category: str

    class Config:
        from_attributes = True


class AnswerCreate(BaseModel):
    answer_text: str = Field(..., min_length=10, max_length=5000, description="Answer, at least 10 characters")


class AnswerResponse(BaseModel):
    id: int
    daily_question_id: int
    profile_id: int
    answer_text: str
    created_at: datetime

    class Config:
        from_attributes = True


class ReactionUpdate(BaseModel):
    """Setting the same emoji again clears it."""
    emoji: Optional[str] = Field(None, max_length=16)
    comment: Optional[str] = Field(None, max_length=1000)


class ReactionResponse(BaseModel):
    id: int
    daily_question_id: int
    profile_id: int
    emoji: Optional[str]
    comment: Optional[str]

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    id: int
    daily_question_id: int
    profile_id: int
    body: str
    created_at: datetime

    class Config:
        from_attributes = True


class DailyQuestionResponse(BaseModel):
    """
    A room's question for one day.

    partner_answer stays empty until the caller has answered themselves;
    partner_answered tells the client whether there is something to unlock.
    """
    id: int
    uuid: str
    date_key: str
    question: QuestionResponse
    my_answer: Optional[AnswerResponse] = None
    partner_answer: Optional[AnswerResponse] = None
    partner_answered: bool = False


class DailyQuestionDetailResponse(DailyQuestionResponse):
    my_reaction: Optional[ReactionResponse] = None
    partner_reaction: Optional[ReactionResponse] = None
    messages: List[MessageResponse] = []


class QuestionHistoryItem(BaseModel):
    id: int
    date_key: str
    question: QuestionResponse
    status: Literal["completed", "waiting", "missed"]
    answered_by_me: bool
