from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_caller_uuid, get_current_profile
from app.models.profile import Profile
from app.schemas.profile import ProfileCreate, ProfileResponse, ProfileUpdate
from app.schemas.result import Result
from app.services.profile_service import ProfileService

router = APIRouter()


@router.post("", response_model=Result[ProfileResponse], status_code=status.HTTP_201_CREATED)
async def create_profile(
    profile_data: ProfileCreate,
    user_uuid: str = Depends(get_caller_uuid),
    db: Session = Depends(get_db)
):
    """Create the caller's profile after their first sign-in."""
    service = ProfileService(db)
    profile = service.create_profile(user_uuid, profile_data)
    return Result.successful(data=ProfileResponse.model_validate(profile))


@router.get("/me", response_model=Result[ProfileResponse])
async def get_my_profile(current_profile: Profile = Depends(get_current_profile)):
    """Get the caller's profile."""
    return Result.successful(data=ProfileResponse.model_validate(current_profile))


@router.patch("/me", response_model=Result[ProfileResponse])
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_profile: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Update display name or notification language."""
    service = ProfileService(db)
    profile = service.update_profile(current_profile, profile_data)
    return Result.successful(data=ProfileResponse.model_validate(profile))
