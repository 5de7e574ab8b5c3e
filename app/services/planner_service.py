import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exception import BadRequestException, InternalServerException, ResourceNotFoundException
from app.models.planner import DateCompletion, DateIdea, SharedEvent, SharedTask
from app.models.profile import Profile
from app.models.room import Room
from app.repositories.planner_repository import (
    DateCompletionRepository,
    DateIdeaRepository,
    SharedEventRepository,
    SharedTaskRepository,
)
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
from app.utils.date_keys import as_utc, business_date_key, utc_now

logger = logging.getLogger(__name__)


class PlannerService:
    """Shared calendar, to-do list and date ideas of a room."""

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = SharedEventRepository(db)
        self.task_repo = SharedTaskRepository(db)
        self.idea_repo = DateIdeaRepository(db)
        self.completion_repo = DateCompletionRepository(db)

    # Events

    def list_events(self, room: Room, upcoming_only: bool = False) -> List[EventResponse]:
        if upcoming_only:
            events = self.event_repo.list_upcoming(room.id, business_date_key())
        else:
            events = self.event_repo.list_all(room.id)
        return [EventResponse.model_validate(e) for e in events]

    def create_event(self, room: Room, profile: Profile, data: EventCreate) -> EventResponse:
        event = self.event_repo.create(self._new_event(room, profile, data))
        return EventResponse.model_validate(event)

    def update_event(self, room: Room, event_id: int, data: EventUpdate) -> EventResponse:
        """
        Update an event. A changed reminder time re-arms the reminder so
        it fires again at the new time.
        """
        event = self._get_event(room, event_id)
        update_data = data.model_dump(exclude_unset=True)

        for field in ("start_at", "end_at", "reminder_at"):
            if field in update_data:
                update_data[field] = as_utc(update_data[field])

        if "start_at" in update_data:
            if update_data["start_at"] is None:
                raise BadRequestException("start_at cannot be cleared")
            update_data["date_key"] = business_date_key(update_data["start_at"])

        end_at = update_data.get("end_at", event.end_at)
        start_at = update_data.get("start_at", event.start_at)
        if end_at is not None and as_utc(end_at) < as_utc(start_at):
            raise BadRequestException("end_at must not be before start_at")

        if "reminder_at" in update_data and update_data["reminder_at"] != as_utc(event.reminder_at):
            update_data["reminder_sent_at"] = None

        event = self.event_repo.update(event.id, update_data)
        return EventResponse.model_validate(event)

    def delete_event(self, room: Room, event_id: int) -> bool:
        event = self._get_event(room, event_id)
        return self.event_repo.delete(event.id)

    def _get_event(self, room: Room, event_id: int) -> SharedEvent:
        event = self.event_repo.get_in_room(event_id, room.id)
        if not event:
            raise ResourceNotFoundException("Event", event_id)
        return event

    def _new_event(self, room: Room, profile: Profile, data) -> SharedEvent:
        start_at = as_utc(data.start_at)
        return SharedEvent(
            room_id=room.id,
            created_by_id=profile.id,
            title=data.title.strip(),
            description=data.description,
            location=data.location,
            start_at=start_at,
            end_at=as_utc(data.end_at),
            all_day=data.all_day,
            date_key=business_date_key(start_at),
            reminder_at=as_utc(data.reminder_at),
        )

    # Tasks

    def list_tasks(self, room: Room, include_done: bool = True) -> List[TaskResponse]:
        return [
            TaskResponse.model_validate(t)
            for t in self.task_repo.list_for_room(room.id, include_done)
        ]

    def create_task(self, room: Room, profile: Profile, data: TaskCreate) -> TaskResponse:
        due_at = as_utc(data.due_at)
        task = SharedTask(
            room_id=room.id,
            created_by_id=profile.id,
            title=data.title.strip(),
            notes=data.notes,
            due_at=due_at,
            due_date_key=business_date_key(due_at) if due_at else None,
            reminder_at=as_utc(data.reminder_at),
        )
        return TaskResponse.model_validate(self.task_repo.create(task))

    def update_task(self, room: Room, task_id: int, data: TaskUpdate) -> TaskResponse:
        task = self._get_task(room, task_id)
        update_data = data.model_dump(exclude_unset=True)

        if "due_at" in update_data:
            update_data["due_at"] = as_utc(update_data["due_at"])
            due_at = update_data["due_at"]
            update_data["due_date_key"] = business_date_key(due_at) if due_at else None

        if "reminder_at" in update_data:
            update_data["reminder_at"] = as_utc(update_data["reminder_at"])
            if update_data["reminder_at"] != as_utc(task.reminder_at):
                update_data["reminder_sent_at"] = None

        task = self.task_repo.update(task.id, update_data)
        return TaskResponse.model_validate(task)

    def toggle_task(self, room: Room, task_id: int) -> TaskResponse:
        task = self._get_task(room, task_id)
        is_done = not task.is_done
        task = self.task_repo.update(
            task.id, {"is_done": is_done, "completed_at": utc_now() if is_done else None}
        )
        return TaskResponse.model_validate(task)

    def delete_task(self, room: Room, task_id: int) -> bool:
        task = self._get_task(room, task_id)
        return self.task_repo.delete(task.id)

    def _get_task(self, room: Room, task_id: int) -> SharedTask:
        task = self.task_repo.get_in_room(task_id, room.id)
        if not task:
            raise ResourceNotFoundException("Task", task_id)
        return task

    # Date ideas

    def list_date_ideas(self, room: Room) -> List[DateIdeaResponse]:
        return [DateIdeaResponse.model_validate(i) for i in self.idea_repo.list_available(room.id)]

    def create_date_idea(self, room: Room, data: DateIdeaCreate) -> DateIdeaResponse:
        idea = self.idea_repo.create(
            DateIdea(
                room_id=room.id,
                title=data.title.strip(),
                description=data.description,
                category=data.category,
            )
        )
        return DateIdeaResponse.model_validate(idea)

    def list_date_plans(self, room: Room) -> List[DateCompletionResponse]:
        return [
            DateCompletionResponse.model_validate(c)
            for c in self.completion_repo.list_in_date_range(room.id)
        ]

    def plan_date(
        self, room: Room, profile: Profile, idea_id: int, data: DatePlanRequest
    ) -> DatePlanResponse:
        """
        Put a date idea on the calendar.

        The event and the plan record are written in one transaction: either
        both exist afterwards or neither does.
        """
        idea = self.idea_repo.get_available(idea_id, room.id)
        if not idea:
            raise ResourceNotFoundException("Date idea", idea_id)

        event = self._new_event(
            room,
            profile,
            EventCreate(
                title=idea.title,
                description=idea.description,
                location=data.location,
                start_at=data.start_at,
                end_at=data.end_at,
                reminder_at=data.reminder_at,
            ),
        )
        try:
            self.db.add(event)
            self.db.flush()
            plan = DateCompletion(
                room_id=room.id,
                date_idea_id=idea.id,
                event_id=event.id,
                created_by_id=profile.id,
                date_key=event.date_key,
            )
            self.db.add(plan)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error("Planning date idea %s for room %s failed", idea.id, room.id, exc_info=True)
            raise InternalServerException("Could not plan the date. Nothing was saved.")

        self.db.refresh(event)
        self.db.refresh(plan)
        return DatePlanResponse(
            event=EventResponse.model_validate(event),
            plan=DateCompletionResponse.model_validate(plan),
        )

    def complete_date_plan(self, room: Room, plan_id: int) -> DateCompletionResponse:
        plan = self.completion_repo.get_in_room(plan_id, room.id)
        if not plan:
            raise ResourceNotFoundException("Date plan", plan_id)
        if plan.completed_at is None:
            plan = self.completion_repo.update(plan.id, {"completed_at": utc_now()})
        return DateCompletionResponse.model_validate(plan)
