from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.dependencies import get_current_profile, get_current_room
from app.models.profile import Profile
from app.models.room import Room
from app.schemas.question import (
    AnswerCreate,
    AnswerResponse,
    DailyQuestionDetailResponse,
    DailyQuestionResponse,
    MessageCreate,
    MessageResponse,
    QuestionHistoryItem,
    ReactionResponse,
    ReactionUpdate,
)
from app.schemas.result import Result
from app.services.daily_question_service import DailyQuestionService

router = APIRouter()


@router.get("/today", response_model=Result[DailyQuestionResponse])
async def get_today(
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Today's question, assigned on the spot if the daily job has not run yet."""
    service = DailyQuestionService(db)
    return Result.successful(data=service.ensure_today(current_room, current_profile))


@router.get("/history", response_model=Result[List[QuestionHistoryItem]])
async def get_history(
    limit: int = Query(30, ge=1, le=365),
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = DailyQuestionService(db)
    return Result.successful(data=service.get_history(current_room, current_profile, limit))


@router.get("/{date_key}", response_model=Result[DailyQuestionDetailResponse])
async def get_by_date(
    date_key: str,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Question of one day with both answers, reactions and the conversation."""
    service = DailyQuestionService(db)
    return Result.successful(data=service.get_by_date(current_room, current_profile, date_key))


@router.post(
    "/{daily_question_id}/answers",
    response_model=Result[AnswerResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_answer(
    daily_question_id: int,
    answer_data: AnswerCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Answer a daily question. Each member answers once."""
    service = DailyQuestionService(db)
    answer = service.submit_answer(current_room, current_profile, daily_question_id, answer_data)
    return Result.successful(data=answer)


@router.put("/{daily_question_id}/reaction", response_model=Result[Optional[ReactionResponse]])
async def set_reaction(
    daily_question_id: int,
    reaction_data: ReactionUpdate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Set or toggle the caller's reaction; data is null once it is cleared."""
    service = DailyQuestionService(db)
    reaction = service.set_reaction(current_room, current_profile, daily_question_id, reaction_data)
    return Result.successful(data=reaction)


@router.post(
    "/{daily_question_id}/messages",
    response_model=Result[MessageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_message(
    daily_question_id: int,
    message_data: MessageCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = DailyQuestionService(db)
    message = service.add_message(current_room, current_profile, daily_question_id, message_data)
    return Result.successful(data=message)


@router.get("/{daily_question_id}/messages", response_model=Result[List[MessageResponse]])
async def list_messages(
    daily_question_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = DailyQuestionService(db)
    return Result.successful(data=service.list_messages(current_room, daily_question_id))
