from sqlalchemy.orm import Session
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository
from app.schemas.profile import ProfileCreate, ProfileUpdate
from app.core.exception import DuplicateResourceException, ResourceNotFoundException


class ProfileService:
    """Service layer for profile operations."""

    def __init__(self, db: Session):
        self.db = db
        self.profile_repo = ProfileRepository(db)

    def create_profile(self, user_uuid: str, data: ProfileCreate) -> Profile:
        """
        Create the profile of a user the auth provider already knows.

        Args:
            user_uuid: Identity presented by the caller
            data: Profile details

        Raises:
            DuplicateResourceException: If the profile exists already
        """
        if self.profile_repo.get_by_uuid(user_uuid):
            raise DuplicateResourceException("Profile", user_uuid)

        profile = Profile(uuid=user_uuid, display_name=data.display_name, locale=data.locale)
        return self.profile_repo.create(profile)

    def get_profile(self, user_uuid: str) -> Profile:
        profile = self.profile_repo.get_by_uuid(user_uuid)
        if not profile:
            raise ResourceNotFoundException("Profile", user_uuid)
        return profile

    def update_profile(self, profile: Profile, data: ProfileUpdate) -> Profile:
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)
        updated = self.profile_repo.update(profile.id, update_data)
        if not updated:
            raise ResourceNotFoundException("Profile", profile.uuid)
        return updated
