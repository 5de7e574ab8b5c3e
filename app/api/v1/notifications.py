from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.dependencies import get_current_profile, require_service_role
from app.models.profile import Profile
from app.schemas.notification import (
    DispatchResult,
    NotificationResponse,
    PushMessage,
    PushSubscriptionCreate,
    PushSubscriptionResponse,
)
from app.schemas.result import Result
from app.services.notification_service import NotificationService

router = APIRouter()


@router.get("", response_model=Result[List[NotificationResponse]])
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    service = NotificationService(db)
    return Result.successful(data=service.list_notifications(current_profile, limit))


@router.get("/unread-count", response_model=Result[dict])
async def unread_count(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Count for the app badge."""
    service = NotificationService(db)
    return Result.successful(data={"unread": service.unread_count(current_profile)})


@router.post("/read-all", response_model=Result[dict])
async def mark_all_read(
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    service = NotificationService(db)
    return Result.successful(data={"updated": service.mark_all_read(current_profile)})


@router.post("/subscriptions", response_model=Result[PushSubscriptionResponse], status_code=status.HTTP_201_CREATED)
async def register_subscription(
    subscription_data: PushSubscriptionCreate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Register this browser for push notifications."""
    service = NotificationService(db)
    return Result.successful(data=service.register_subscription(current_profile, subscription_data))


@router.delete("/subscriptions", response_model=Result[dict])
async def remove_subscription(
    endpoint: str = Query(..., min_length=1),
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    service = NotificationService(db)
    removed = service.remove_subscription(current_profile, endpoint)
    return Result.successful(data={"removed": removed})


@router.post("/send", response_model=DispatchResult, dependencies=[Depends(require_service_role)])
async def send_push(message: PushMessage, db: Session = Depends(get_db)):
    """Push a message to every device of one profile. Service role only."""
    service = NotificationService(db)
    return service.send_push_to_user(message)


@router.post("/{notification_id}/read", response_model=Result[NotificationResponse])
async def mark_read(
    notification_id: int,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    service = NotificationService(db)
    return Result.successful(data=service.mark_read(current_profile, notification_id))
