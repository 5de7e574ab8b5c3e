from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.dependencies import get_current_profile, get_current_room
from app.models.profile import Profile
from app.models.room import Room
from app.schemas.planner import (
    DateCompletionResponse,
    DateIdeaCreate,
    DateIdeaResponse,
    DatePlanRequest,
    DatePlanResponse,
    EventCreate,
    EventResponse,
    EventUpdate,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from app.schemas.result import Result
from app.services.planner_service import PlannerService

router = APIRouter()


# Events

@router.get("/events", response_model=Result[List[EventResponse]])
async def list_events(
    upcoming: bool = Query(False, description="Only events from today's date key on"),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.list_events(current_room, upcoming))


@router.post("/events", response_model=Result[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.create_event(current_room, current_profile, event_data))


@router.patch("/events/{event_id}", response_model=Result[EventResponse])
async def update_event(
    event_id: int,
    event_data: EventUpdate,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Update an event. Moving its reminder re-arms it."""
    service = PlannerService(db)
    return Result.successful(data=service.update_event(current_room, event_id, event_data))


@router.delete("/events/{event_id}", response_model=Result[dict])
async def delete_event(
    event_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    service.delete_event(current_room, event_id)
    return Result.successful(data={"message": "Event deleted successfully"})


# Tasks

@router.get("/tasks", response_model=Result[List[TaskResponse]])
async def list_tasks(
    include_done: bool = Query(True),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.list_tasks(current_room, include_done))


@router.post("/tasks", response_model=Result[TaskResponse], status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.create_task(current_room, current_profile, task_data))


@router.patch("/tasks/{task_id}", response_model=Result[TaskResponse])
async def update_task(
    task_id: int,
    task_data: TaskUpdate,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.update_task(current_room, task_id, task_data))


@router.post("/tasks/{task_id}/toggle", response_model=Result[TaskResponse])
async def toggle_task(
    task_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Mark a task done, or open it again."""
    service = PlannerService(db)
    return Result.successful(data=service.toggle_task(current_room, task_id))


@router.delete("/tasks/{task_id}", response_model=Result[dict])
async def delete_task(
    task_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    service.delete_task(current_room, task_id)
    return Result.successful(data={"message": "Task deleted successfully"})


# Date ideas

@router.get("/date-ideas", response_model=Result[List[DateIdeaResponse]])
async def list_date_ideas(
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Shared catalogue plus the room's own ideas."""
    service = PlannerService(db)
    return Result.successful(data=service.list_date_ideas(current_room))


@router.post("/date-ideas", response_model=Result[DateIdeaResponse], status_code=status.HTTP_201_CREATED)
async def create_date_idea(
    idea_data: DateIdeaCreate,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.create_date_idea(current_room, idea_data))


@router.post(
    "/date-ideas/{idea_id}/plan",
    response_model=Result[DatePlanResponse],
    status_code=status.HTTP_201_CREATED,
)
async def plan_date(
    idea_id: int,
    plan_data: DatePlanRequest,
    current_profile: Profile = Depends(get_current_profile),
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    """Put a date idea on the calendar."""
    service = PlannerService(db)
    return Result.successful(data=service.plan_date(current_room, current_profile, idea_id, plan_data))


@router.get("/date-plans", response_model=Result[List[DateCompletionResponse]])
async def list_date_plans(
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.list_date_plans(current_room))


@router.post("/date-plans/{plan_id}/complete", response_model=Result[DateCompletionResponse])
async def complete_date_plan(
    plan_id: int,
    current_room: Room = Depends(get_current_room),
    db: Session = Depends(get_db)
):
    service = PlannerService(db)
    return Result.successful(data=service.complete_date_plan(current_room, plan_id))
